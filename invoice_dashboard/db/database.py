"""
Async PostgreSQL access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `invoice_dashboard/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
- Values are ALWAYS passed as parameters, never formatted into the SQL text.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from invoice_dashboard.config import settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


class DatabaseUnavailableError(RuntimeError):
    """Raised when a query is attempted before the pool is initialized."""


# Exceptions treated as storage failures at the call sites.
# asyncio.TimeoutError (command_timeout) is only an OSError from Python 3.11.
STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
    DatabaseUnavailableError,
)


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq's sslmode query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    """
    DSN for the pool, taken from settings.DATABASE_URL.

    Raises:
        DatabaseUnavailableError: DATABASE_URL is empty
    """
    url = (settings.DATABASE_URL or "").strip()
    if not url:
        raise DatabaseUnavailableError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    """Create the pool once per process. Calling it again is a no-op."""
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT,
    )
    logger.info("Database pool initialized")


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None
    logger.info("Database pool closed")


def pool() -> asyncpg.Pool:
    """
    The initialized pool.

    Raises:
        DatabaseUnavailableError: init_pool() has not run (or close_pool() has)
    """
    if _pool is None:
        raise DatabaseUnavailableError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE). Returns the command status tag,
    e.g. "DELETE 1".
    """
    return await pool().execute(sql, *args)
