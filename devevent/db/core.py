"""Core database connection pool management.

The process shares one ``AsyncConnectionPool``. It is opened lazily by the
first request that needs it; concurrent first callers all await the same
opening task, and a failed attempt is forgotten so the next call retries.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from devevent.config import get_settings

_logger = logging.getLogger(__name__)


async def _open_pool() -> AsyncConnectionPool:
    settings = get_settings().database
    pool = AsyncConnectionPool(
        settings.url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.acquire_timeout,
        max_idle=settings.idle_timeout,
        kwargs={"connect_timeout": settings.connect_timeout, "autocommit": True},
        check=AsyncConnectionPool.check_connection,
        open=False,
    )
    try:
        await pool.open(wait=True, timeout=settings.acquire_timeout)
        # Import here to avoid circular imports
        from devevent.db.schema import _ensure_schema

        await _ensure_schema(pool)
    except BaseException:
        await pool.close()
        raise
    _logger.info(
        "Database connection pool initialized (min=%d, max=%d, acquire_timeout=%ss, idle_timeout=%ss)",
        settings.pool_min_size,
        settings.pool_max_size,
        settings.acquire_timeout,
        settings.idle_timeout,
    )
    return pool


class PoolHolder:
    """Lazily opened, process-wide connection pool."""

    def __init__(
        self, factory: Callable[[], Awaitable[AsyncConnectionPool]] = _open_pool
    ) -> None:
        self._factory = factory
        self._pool: AsyncConnectionPool | None = None
        self._pending: asyncio.Future[AsyncConnectionPool] | None = None

    @property
    def pool(self) -> AsyncConnectionPool | None:
        return self._pool

    async def get(self) -> AsyncConnectionPool:
        if self._pool is not None:
            return self._pool
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._factory())
            self._pending.add_done_callback(self._forget_failed)
        # shield: a cancelled caller must not cancel the shared attempt
        pool = await asyncio.shield(self._pending)
        if self._pool is None:
            self._pool = pool
        self._pending = None
        return self._pool

    def _forget_failed(self, attempt: "asyncio.Future[AsyncConnectionPool]") -> None:
        # Runs even when every waiter was cancelled; retrieving the
        # exception also keeps asyncio from reporting it as unhandled.
        if attempt.cancelled():
            failed = True
        else:
            failed = attempt.exception() is not None
        if failed and attempt is self._pending:
            self._pending = None

    async def close(self) -> None:
        pending, self._pending = self._pending, None
        if pending is not None and not pending.done():
            pending.cancel()
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()
            _logger.info("Database connection pool closed")


_holder = PoolHolder()


async def init_pool() -> AsyncConnectionPool:
    """Open the shared pool now instead of on first use."""
    return await _holder.get()


async def close_pool() -> None:
    await _holder.close()


@asynccontextmanager
async def _get_connection():
    pool = await _holder.get()
    async with pool.connection() as conn:
        yield conn


def get_pool() -> AsyncConnectionPool | None:
    """Get the connection pool instance, if it has been opened."""
    return _holder.pool


def get_pool_stats() -> dict[str, object]:
    """Get current pool statistics for monitoring."""
    pool = _holder.pool
    if pool is None:
        return {"status": "not_initialized"}
    stats = pool.get_stats()
    return {
        "status": "active",
        "size": stats.get("pool_size"),
        "available": stats.get("pool_available"),
        "waiting": stats.get("requests_waiting"),
        "min_size": stats.get("pool_min"),
        "max_size": stats.get("pool_max"),
    }


__all__ = [
    "PoolHolder",
    "_get_connection",
    "close_pool",
    "get_pool",
    "get_pool_stats",
    "init_pool",
]
