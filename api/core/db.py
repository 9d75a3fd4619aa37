"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. It is opened on startup (or on the first
statement if startup could not reach the server) and closed on
shutdown as part of the application context (see `core/context.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every helper acquires a connection from the pool for exactly one statement and
releases it before returning, on success and on failure.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


# Failures raised by asyncpg while connecting or running a statement.
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class Database:
    def __init__(self, dsn: str, *, min_size: int = 1, max_size: int = 5) -> None:
        self._dsn = _sanitize_database_url(dsn)
        self._min_size = min_size
        self._max_size = max_size
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    async def connect(self) -> asyncpg.Pool:
        """
        Create the pool if it does not exist yet.

        Called on startup, and again by every helper while the pool is missing,
        so a database that comes up after the API is picked up on the next call.
        """
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            if self._pool is None:
                self._pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=30,
                )
        return self._pool

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        pool = await self.connect()
        row = await pool.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        pool = await self.connect()
        rows = await pool.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return its status tag,
        e.g. "DELETE 1".
        """
        pool = await self.connect()
        return await pool.execute(sql, *args)

    async def ping(self) -> bool:
        try:
            pool = await self.connect()
            return await pool.fetchval("SELECT 1") == 1
        except DRIVER_ERRORS:
            return False


def affected_rows(status: str) -> int:
    """
    Parse the row count out of an asyncpg status tag ("UPDATE 3" -> 3).
    """
    try:
        return int((status or "").rsplit(" ", 1)[-1])
    except ValueError:
        return 0
