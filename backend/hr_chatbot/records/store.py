"""
Employee record store with nearest-neighbour search.

Store path (seeding):
    ingest_employee()
      → build summary, embed summary
      → upsert (employee_id, record, summary, embedding)

Query path (employee_lookup tool):
    similarity_search(embedding, k)
      → cosine similarity over the stored embeddings
      → top-k EmployeeMatch, highest score first

Backends:
    PostgresEmployeeStore - pgvector table with an HNSW cosine index
                            (created by the alembic migration)
    InMemoryEmployeeStore - numpy, process-local; local runs and tests
"""

from typing import Protocol

import numpy as np
from psycopg import sql
from psycopg.types.json import Jsonb

from hr_chatbot.core.config import Settings
from hr_chatbot.core.db import get_db
from hr_chatbot.core.logging import get_logger
from hr_chatbot.core.retry import call_external
from hr_chatbot.records.models import EmployeeMatch, EmployeeRecord, StoredEmployee

log = get_logger(__name__)


class EmployeeStore(Protocol):
    async def upsert(self, employee: StoredEmployee) -> None: ...

    async def similarity_search(self, embedding: list[float], k: int) -> list[EmployeeMatch]: ...

    async def clear(self) -> int: ...

    async def count(self) -> int: ...


class PostgresEmployeeStore:
    def __init__(
        self,
        database_url: str,
        *,
        table: str = "employees",
        timeout: float | None = 30.0,
        max_attempts: int = 3,
    ):
        self.database_url = database_url
        self.table = sql.Identifier(table)
        self.timeout = timeout
        self.max_attempts = max_attempts

    async def upsert(self, employee: StoredEmployee) -> None:
        """Insert or replace one record; summary and embedding are always written together."""
        query = sql.SQL(
            """
            INSERT INTO {table} (employee_id, record, summary, embedding, updated_at)
            VALUES (%s, %s, %s, %s::vector, now())
            ON CONFLICT (employee_id)
            DO UPDATE SET
                record     = EXCLUDED.record,
                summary    = EXCLUDED.summary,
                embedding  = EXCLUDED.embedding,
                updated_at = now()
            """
        ).format(table=self.table)
        params = (
            employee.record.employee_id,
            Jsonb(employee.record.model_dump(mode="json")),
            employee.summary,
            _vec_literal(employee.embedding),
        )

        async def run() -> None:
            async with get_db(self.database_url) as conn:
                await conn.execute(query, params)

        await call_external("record_store", run, max_attempts=self.max_attempts, timeout=self.timeout)

    async def similarity_search(self, embedding: list[float], k: int) -> list[EmployeeMatch]:
        """Top-k records by cosine similarity (1 - cosine distance)."""
        vec = _vec_literal(embedding)
        query = sql.SQL(
            """
            SELECT record,
                   summary,
                   1 - (embedding <=> %s::vector) AS score
            FROM   {table}
            ORDER  BY embedding <=> %s::vector
            LIMIT  %s
            """
        ).format(table=self.table)

        async def run() -> list[dict]:
            async with get_db(self.database_url) as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, (vec, vec, k))
                    return await cur.fetchall()

        rows = await call_external("record_store", run, max_attempts=self.max_attempts, timeout=self.timeout)
        log.debug("similarity_search_done", k=k, returned=len(rows))
        return [
            EmployeeMatch(
                record=EmployeeRecord.model_validate(row["record"]),
                summary=row["summary"],
                score=float(row["score"]),
            )
            for row in rows
        ]

    async def clear(self) -> int:
        query = sql.SQL("DELETE FROM {table}").format(table=self.table)

        async def run() -> int:
            async with get_db(self.database_url) as conn:
                cur = await conn.execute(query)
                return cur.rowcount

        return await call_external("record_store", run, max_attempts=self.max_attempts, timeout=self.timeout)

    async def count(self) -> int:
        query = sql.SQL("SELECT count(*) AS n FROM {table}").format(table=self.table)

        async def run() -> int:
            async with get_db(self.database_url) as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query)
                    row = await cur.fetchone()
                    return row["n"]

        return await call_external("record_store", run, max_attempts=self.max_attempts, timeout=self.timeout)


class InMemoryEmployeeStore:
    """Process-local store keyed by employee_id; cosine similarity via numpy."""

    def __init__(self) -> None:
        self._employees: dict[str, StoredEmployee] = {}

    async def upsert(self, employee: StoredEmployee) -> None:
        self._employees[employee.record.employee_id] = employee

    async def similarity_search(self, embedding: list[float], k: int) -> list[EmployeeMatch]:
        if not self._employees or k <= 0:
            return []

        stored = list(self._employees.values())
        matrix = np.array([e.embedding for e in stored], dtype=float)
        query = np.array(embedding, dtype=float)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)

        # stable sort keeps insertion order among equal scores
        order = np.argsort(-scores, kind="stable")[:k]
        return [
            EmployeeMatch(record=stored[i].record, summary=stored[i].summary, score=float(scores[i]))
            for i in order
        ]

    async def clear(self) -> int:
        removed = len(self._employees)
        self._employees.clear()
        return removed

    async def count(self) -> int:
        return len(self._employees)


def build_employee_store(settings: Settings) -> EmployeeStore:
    if settings.record_store_backend == "memory":
        log.warning("record_store_in_memory", detail="store starts empty; seeding from another process is not visible")
        return InMemoryEmployeeStore()
    return PostgresEmployeeStore(
        settings.database_url,
        table=settings.employees_table,
        timeout=settings.request_timeout_seconds,
        max_attempts=settings.max_attempts,
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _vec_literal(v: list[float]) -> str:
    """Convert a float list to a Postgres vector literal string."""
    return "[" + ",".join(str(x) for x in v) + "]"
