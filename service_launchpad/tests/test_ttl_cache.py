"""
Unit tests for the single-flight TTL cache.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from service_launchpad.app.caching.ttl_cache import TTLCache


class Counter:
    """Fetch function that counts calls and can be held open."""

    def __init__(self, value="value", gate: asyncio.Event = None, error: Exception = None):
        self.value = value
        self.gate = gate
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return f"{self.value}-{self.calls}"


class TestTTLCache:
    """Test cases for TTLCache."""

    @pytest.fixture
    def cache(self, clock):
        return TTLCache(1000, name="test", clock=clock)

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            TTLCache(0)

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, cache, clock):
        fetch = Counter()

        assert await cache.get("k", fetch) == "value-1"
        clock.advance(999)
        assert await cache.get("k", fetch) == "value-1"
        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_refetch_once_ttl_elapsed(self, cache, clock):
        fetch = Counter()

        await cache.get("k", fetch)
        clock.advance(1000)

        assert await cache.get("k", fetch) == "value-2"
        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_entry_is_stamped_when_fetch_starts(self, cache, clock):
        async def slow_fetch():
            clock.advance(600)
            return "slow"

        await cache.get("k", slow_fetch)
        clock.advance(400)

        assert cache.peek("k") is None
        assert await cache.get("k", Counter()) == "value-1"

    @pytest.mark.asyncio
    async def test_ttl_override_per_lookup(self, cache, clock):
        fetch = Counter()

        await cache.get("k", fetch)
        clock.advance(200)

        assert await cache.get("k", fetch, ttl_ms=100) == "value-2"

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, cache):
        gate = asyncio.Event()
        fetch = Counter(gate=gate)

        tasks = [asyncio.ensure_future(cache.get("k", fetch)) for _ in range(5)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks)

        assert results == ["value-1"] * 5
        assert fetch.calls == 1
        assert cache.stats()["joins"] == 4

    @pytest.mark.asyncio
    async def test_failed_fetch_reaches_all_waiters_and_is_not_cached(self, cache):
        gate = asyncio.Event()
        fetch = Counter(gate=gate, error=RuntimeError("upstream down"))

        tasks = [asyncio.ensure_future(cache.get("k", fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert fetch.calls == 1
        assert len(cache) == 0

        fetch.error = None
        assert await cache.get("k", fetch) == "value-2"

    @pytest.mark.asyncio
    async def test_force_bust_refetches(self, cache):
        fetch = Counter()

        await cache.get("k", fetch)
        assert await cache.get("k", fetch, force_bust=True) == "value-2"
        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_force_bust_joins_inflight_fetch(self, cache):
        gate = asyncio.Event()
        fetch = Counter(gate=gate)

        first = asyncio.ensure_future(cache.get("k", fetch))
        await asyncio.sleep(0)
        second = asyncio.ensure_future(cache.get("k", fetch, force_bust=True))
        await asyncio.sleep(0)
        gate.set()

        assert await first == await second == "value-1"
        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_fetch(self, cache):
        gate = asyncio.Event()
        fetch = Counter(gate=gate)

        first = asyncio.ensure_future(cache.get("k", fetch))
        second = asyncio.ensure_future(cache.get("k", fetch))
        await asyncio.sleep(0)
        first.cancel()
        gate.set()

        assert await second == "value-1"
        assert cache.peek("k") == "value-1"

    @pytest.mark.asyncio
    async def test_fetch_timeout(self, clock):
        cache = TTLCache(1000, clock=clock, fetch_timeout_s=0.01)

        async def slow():
            await asyncio.sleep(1)
            return "late"

        with pytest.raises(asyncio.TimeoutError):
            await cache.get("k", slow)
        assert cache.stats()["failures"] == 1
        assert cache.stats()["inflight"] == 0

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, cache):
        fetch = Counter()

        assert await cache.get("a", fetch) == "value-1"
        assert await cache.get("b", fetch) == "value-2"
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_peek_and_invalidate(self, cache, clock):
        assert cache.peek("k") is None
        await cache.get("k", Counter())

        assert cache.peek("k") == "value-1"
        assert cache.invalidate("k") is True
        assert cache.invalidate("k") is False
        assert cache.peek("k") is None

    @pytest.mark.asyncio
    async def test_sweep_drops_old_entries(self, cache, clock):
        await cache.get("old", Counter())
        clock.advance(1500)
        await cache.get("new", Counter())
        clock.advance(600)

        assert cache.sweep() == 1
        assert cache.peek("new") == "value-1"
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_background_sweeper(self, clock):
        cache = TTLCache(1000, clock=clock, sweep_interval_s=0.01)
        await cache.get("k", Counter())
        clock.advance(5000)

        cache.start_sweeper()
        await asyncio.sleep(0.05)
        await cache.stop_sweeper()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_records_metrics(self, clock):
        metrics = MagicMock()
        cache = TTLCache(1000, name="honest_status", clock=clock, metrics=metrics)

        await cache.get("k", Counter())
        await cache.get("k", Counter())

        metrics.record_cache_lookup.assert_any_call("honest_status", "miss")
        metrics.record_cache_lookup.assert_any_call("honest_status", "hit")

    @pytest.mark.asyncio
    async def test_stats(self, cache):
        fetch = Counter()
        await cache.get("k", fetch)
        await cache.get("k", fetch)

        stats = cache.stats()
        assert stats["name"] == "test"
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_ratio"] == 0.5
