"""
Tests for the checkpointer backends and per-thread locks.
"""

import asyncio
from unittest.mock import MagicMock

import psycopg
import pytest
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.checkpoint.postgres.aio import AsyncPostgresSaver
from tenacity import wait_none

from hr_chatbot.core import retry as retry_module
from hr_chatbot.core.checkpointer import RetryingPostgresSaver, ThreadLocks, open_checkpointer
from hr_chatbot.core.config import Settings
from hr_chatbot.core.errors import ExternalServiceError

CONFIG = {"configurable": {"thread_id": "t1", "checkpoint_ns": ""}}


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(retry_module, "wait_exponential", lambda **kwargs: wait_none())


class ParentCall:
    """Stands in for an AsyncPostgresSaver method: fails with ``errors`` in order, then returns ``result``."""

    def __init__(self, errors=(), result=None):
        self.errors = list(errors)
        self.result = result
        self.calls = []

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.fixture
async def saver():
    saver = RetryingPostgresSaver(MagicMock())
    saver.max_attempts = 3
    return saver


class TestRetryingPostgresSaver:
    """Checkpoint reads and writes go through the retry boundary."""

    async def test_read_retried_after_dropped_connection(self, saver, monkeypatch):
        parent = ParentCall(errors=[psycopg.OperationalError("server closed the connection")], result="tuple")
        monkeypatch.setattr(AsyncPostgresSaver, "aget_tuple", parent)

        assert await saver.aget_tuple(CONFIG) == "tuple"
        assert len(parent.calls) == 2
        assert parent.calls[-1] == ((CONFIG,), {})

    async def test_write_forwards_arguments(self, saver, monkeypatch):
        parent = ParentCall(result={"configurable": {"checkpoint_id": "c1"}})
        monkeypatch.setattr(AsyncPostgresSaver, "aput", parent)

        result = await saver.aput(CONFIG, {"id": "c1"}, {"step": 1}, {"messages": 2})

        assert result == {"configurable": {"checkpoint_id": "c1"}}
        assert parent.calls == [((CONFIG, {"id": "c1"}, {"step": 1}, {"messages": 2}), {})]

    async def test_pending_writes_forward_keyword_arguments(self, saver, monkeypatch):
        parent = ParentCall(errors=[psycopg.OperationalError("timeout")])
        monkeypatch.setattr(AsyncPostgresSaver, "aput_writes", parent)

        await saver.aput_writes(CONFIG, [("messages", [])], "task-1", task_path="~")

        assert parent.calls[-1] == ((CONFIG, [("messages", [])], "task-1"), {"task_path": "~"})
        assert len(parent.calls) == 2

    async def test_gives_up_after_max_attempts(self, saver, monkeypatch):
        parent = ParentCall(errors=[psycopg.OperationalError("down")] * 5)
        monkeypatch.setattr(AsyncPostgresSaver, "aget_tuple", parent)

        with pytest.raises(ExternalServiceError) as exc_info:
            await saver.aget_tuple(CONFIG)

        assert exc_info.value.service == "checkpoint_read"
        assert len(parent.calls) == 3

    async def test_schema_errors_not_retried(self, saver, monkeypatch):
        parent = ParentCall(errors=[psycopg.errors.UndefinedTable('relation "checkpoints" does not exist')])
        monkeypatch.setattr(AsyncPostgresSaver, "aput", parent)

        with pytest.raises(ExternalServiceError) as exc_info:
            await saver.aput(CONFIG, {}, {}, {})

        assert exc_info.value.service == "checkpoint_write"
        assert len(parent.calls) == 1


class TestOpenCheckpointer:
    async def test_memory_backend(self):
        settings = Settings(checkpointer_backend="memory")

        async with open_checkpointer(settings) as checkpointer:
            assert isinstance(checkpointer, InMemorySaver)


class TestThreadLocks:
    async def test_same_thread_shares_lock(self):
        locks = ThreadLocks()
        held = locks.for_thread("t1")

        assert locks.for_thread("t1") is held
        assert locks.for_thread("t2") is not held

    async def test_unused_locks_are_dropped(self):
        locks = ThreadLocks()
        locks.for_thread("t1")

        await asyncio.sleep(0)
        assert "t1" not in locks._locks
