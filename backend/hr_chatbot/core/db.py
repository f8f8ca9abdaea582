"""
Async database helpers for the employee record store and the health check.
Separate from the AsyncConnectionPool used by the LangGraph checkpointer.

psycopg3 (psycopg) API - uses cursor.fetchone(), not fetchrow().

Usage:
    async with get_db(settings.database_url) as conn:
        async with conn.cursor() as cur:
            await cur.execute("SELECT count(*) AS n FROM employees")
            row = await cur.fetchone()   # returns a dict (dict_row factory)
"""

import psycopg
from psycopg.rows import dict_row
from contextlib import asynccontextmanager
from typing import AsyncGenerator


@asynccontextmanager
async def get_db(database_url: str) -> AsyncGenerator[psycopg.AsyncConnection, None]:
    """
    Yields an async Postgres connection with dict_row as the default row factory.
    Closes cleanly on exit.
    """
    conn = await psycopg.AsyncConnection.connect(
        database_url,
        autocommit=True,
        row_factory=dict_row,
    )
    try:
        yield conn
    finally:
        await conn.close()


async def ping(database_url: str) -> None:
    """Round-trip a trivial query; raises on any connection problem."""
    async with get_db(database_url) as conn:
        await conn.execute("SELECT 1")
