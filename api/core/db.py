"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns a single asyncpg pool per process. The pool is opened lazily
by the first request that needs it; concurrent first callers share the same
connection attempt instead of racing to open their own. FastAPI closes it on
shutdown (see `api/main.py`).

Failures are raised as `DatabaseError` subclasses so callers can tell a
missing configuration apart from an unreachable server or a failed query.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from core import settings

logger = logging.getLogger(__name__)

ConnectFn = Callable[[str], Awaitable[asyncpg.Pool]]


class DatabaseError(RuntimeError):
    kind = "database_error"


class ConfigMissingError(DatabaseError):
    kind = "config_missing"


class ConnectionFailedError(DatabaseError):
    kind = "connection_failed"


class QueryFailedError(DatabaseError):
    kind = "query_failed"


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = settings.raw_database_url()
    if not url:
        raise ConfigMissingError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def open_pool(dsn: str) -> asyncpg.Pool:
    """
    Create a pool and prove it can serve a query.

    A pool that was created but fails the probe is terminated before the
    error propagates, so a retry never inherits half-open sockets.
    """
    pool = await asyncpg.create_pool(
        dsn=dsn,
        min_size=settings.pool_min_size(),
        max_size=settings.pool_max_size(),
        timeout=settings.connect_timeout(),
        command_timeout=settings.command_timeout(),
    )
    try:
        await pool.fetchval("SELECT 1")
    except BaseException:
        pool.terminate()
        raise
    return pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    Memoized, lazily-opened connection handle.

    State is at most one established pool and at most one pending attempt.
    The pending attempt is registered before the first `await`, so callers
    arriving while it runs wait on it rather than starting another one.
    A failed attempt is forgotten so the next caller can try again.
    """

    def __init__(self, connect: ConnectFn | None = None) -> None:
        self._connect = connect or open_pool
        self._pool: asyncpg.Pool | None = None
        self._pending: asyncio.Task[asyncpg.Pool] | None = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool

        if self._pending is None:
            dsn = database_url()
            self._pending = asyncio.ensure_future(self._establish(dsn))

        # Shielded: one cancelled request must not cancel everyone's attempt.
        return await asyncio.shield(self._pending)

    async def _establish(self, dsn: str) -> asyncpg.Pool:
        try:
            pool = await self._connect(dsn)
        except Exception as exc:
            logger.warning("db_connect_failed error=%s", type(exc).__name__)
            raise ConnectionFailedError("Could not connect to the database.") from exc
        finally:
            self._pending = None

        self._pool = pool
        logger.info("db_connected")
        return pool

    async def close(self) -> None:
        if self._pending is not None:
            # Let an in-flight attempt settle so its pool is not leaked.
            await asyncio.wait({self._pending})

        pool, self._pool = self._pool, None
        if pool is None:
            return None
        await pool.close()
        logger.info("db_closed")

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        pool = await self.connect()
        try:
            row = await pool.fetchrow(sql, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
            raise QueryFailedError("Query failed.") from exc
        return _record_to_dict(row) if row is not None else None


# Process-wide instance; routes receive it through `events.dependencies`.
database = Database()
