import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from devevent.db import core
from devevent.db.core import PoolHolder


def _fake_pool():
    pool = MagicMock()
    pool.close = AsyncMock()
    return pool


class TestPoolHolder:
    @pytest.mark.asyncio
    async def test_opens_lazily(self):
        factory = AsyncMock(return_value=_fake_pool())
        holder = PoolHolder(factory)

        assert holder.pool is None
        factory.assert_not_called()

        pool = await holder.get()

        assert holder.pool is pool
        factory.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_attempt(self):
        calls = 0
        release = asyncio.Event()
        pool = _fake_pool()

        async def factory():
            nonlocal calls
            calls += 1
            await release.wait()
            return pool

        holder = PoolHolder(factory)
        waiters = [asyncio.create_task(holder.get()) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        assert calls == 1
        assert all(r is pool for r in results)

    @pytest.mark.asyncio
    async def test_failure_is_shared_then_retried(self):
        calls = 0
        release = asyncio.Event()
        pool = _fake_pool()

        async def factory():
            nonlocal calls
            calls += 1
            if calls == 1:
                await release.wait()
                raise ConnectionError("database unreachable")
            return pool

        holder = PoolHolder(factory)
        waiters = [asyncio.create_task(holder.get()) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert calls == 1
        assert all(isinstance(r, ConnectionError) for r in results)
        assert holder.pool is None

        assert await holder.get() is pool
        assert calls == 2

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_attempt(self):
        release = asyncio.Event()
        pool = _fake_pool()

        async def factory():
            await release.wait()
            return pool

        holder = PoolHolder(factory)
        first = asyncio.create_task(holder.get())
        second = asyncio.create_task(holder.get())
        await asyncio.sleep(0)
        first.cancel()
        release.set()

        assert await second is pool
        with pytest.raises(asyncio.CancelledError):
            await first

    @pytest.mark.asyncio
    async def test_failure_after_all_callers_cancelled_is_retried(self):
        calls = 0
        release = asyncio.Event()
        pool = _fake_pool()

        async def factory():
            nonlocal calls
            calls += 1
            if calls == 1:
                await release.wait()
                raise ConnectionError("database unreachable")
            return pool

        holder = PoolHolder(factory)
        first = asyncio.create_task(holder.get())
        await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        release.set()
        for _ in range(10):
            if holder._pending is None:
                break
            await asyncio.sleep(0)

        assert await holder.get() is pool
        assert calls == 2

    @pytest.mark.asyncio
    async def test_close(self):
        pool = _fake_pool()
        holder = PoolHolder(AsyncMock(return_value=pool))
        await holder.get()

        await holder.close()

        pool.close.assert_awaited_once()
        assert holder.pool is None

    @pytest.mark.asyncio
    async def test_close_before_open(self):
        holder = PoolHolder(AsyncMock())

        await holder.close()

        assert holder.pool is None


class TestPoolStats:
    def test_not_initialized(self, monkeypatch):
        monkeypatch.setattr(core, "_holder", PoolHolder(AsyncMock()))

        assert core.get_pool() is None
        assert core.get_pool_stats() == {"status": "not_initialized"}

    @pytest.mark.asyncio
    async def test_active(self, monkeypatch):
        pool = _fake_pool()
        pool.get_stats.return_value = {
            "pool_size": 2,
            "pool_available": 1,
            "requests_waiting": 0,
            "pool_min": 2,
            "pool_max": 10,
        }
        holder = PoolHolder(AsyncMock(return_value=pool))
        monkeypatch.setattr(core, "_holder", holder)

        assert await core.init_pool() is pool
        stats = core.get_pool_stats()

        assert stats["status"] == "active"
        assert stats["size"] == 2
        assert stats["max_size"] == 10
