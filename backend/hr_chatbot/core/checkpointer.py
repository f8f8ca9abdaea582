import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator
from weakref import WeakValueDictionary

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.checkpoint.postgres.aio import AsyncPostgresSaver
from psycopg_pool import AsyncConnectionPool

from hr_chatbot.core.config import Settings
from hr_chatbot.core.logging import get_logger
from hr_chatbot.core.retry import call_external

log = get_logger(__name__)


class RetryingPostgresSaver(AsyncPostgresSaver):
    """
    AsyncPostgresSaver whose checkpoint reads and writes go through the
    bounded-retry boundary. Writes are upserts keyed by
    (thread_id, checkpoint_ns, checkpoint_id), so replaying one is harmless.
    """

    max_attempts: int = 3

    async def aget_tuple(self, config):
        parent = super().aget_tuple
        return await call_external(
            "checkpoint_read", lambda: parent(config), max_attempts=self.max_attempts
        )

    async def aput(self, config, checkpoint, metadata, new_versions):
        parent = super().aput
        return await call_external(
            "checkpoint_write",
            lambda: parent(config, checkpoint, metadata, new_versions),
            max_attempts=self.max_attempts,
        )

    async def aput_writes(self, *args, **kwargs):
        parent = super().aput_writes
        return await call_external(
            "checkpoint_write", lambda: parent(*args, **kwargs), max_attempts=self.max_attempts
        )


@asynccontextmanager
async def open_checkpointer(settings: Settings) -> AsyncIterator[BaseCheckpointSaver]:
    """
    Yield the configured checkpointer for the lifetime of the context.

    postgres: AsyncPostgresSaver on a dedicated connection pool. setup() is
              idempotent - it creates the checkpointer tables (checkpoints,
              checkpoint_writes, checkpoint_blobs) if they don't exist yet.
    memory:   InMemorySaver, lost on restart. Local runs and tests only.
    """
    if settings.checkpointer_backend == "memory":
        log.info("checkpointer_ready", backend="memory")
        yield InMemorySaver()
        return

    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        max_size=20,
        kwargs={"autocommit": True, "prepare_threshold": 0},
        check=AsyncConnectionPool.check_connection,
        open=False,
    )
    async with pool:
        checkpointer = RetryingPostgresSaver(pool)
        checkpointer.max_attempts = settings.max_attempts
        await checkpointer.setup()
        log.info("checkpointer_ready", backend="postgres")
        yield checkpointer


class ThreadLocks:
    """
    One asyncio.Lock per thread_id, created on demand.

    Locks are held weakly: once no run is waiting on a thread's lock it is
    dropped, so the table does not grow with the number of conversations.
    """

    def __init__(self) -> None:
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    def for_thread(self, thread_id: str) -> asyncio.Lock:
        lock = self._locks.get(thread_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[thread_id] = lock
        return lock
