"""
In-memory TTL cache with single-flight fetch de-duplication.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, Optional, TYPE_CHECKING, TypeVar

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], float]


def epoch_ms() -> float:
    """Wall-clock time in epoch milliseconds."""
    return time.time() * 1000.0


@dataclass(frozen=True)
class CacheEntry(Generic[K, V]):
    """A cached value; replaced wholesale on refresh, never mutated."""

    key: K
    value: V
    inserted_at_ms: float


class TTLCache(Generic[K, V]):
    """Process-local cache keyed by ``K`` with a freshness window.

    Concurrent misses for the same key are collapsed into one call of the
    supplied fetch function. Only successful results are stored: a failed
    fetch propagates to every joined caller and leaves the cache untouched.
    Callers that need to remember "not found" must return that outcome as a
    regular value.

    An entry is stamped with the time its fetch started, so a slow fetch
    does not extend the freshness window of the value it produced.

    Reads that race with ``force_bust`` may observe either the stale or the
    refreshed value; the cache is eventually consistent within the TTL.
    """

    def __init__(
        self,
        ttl_ms: float,
        *,
        name: str = "default",
        clock: Optional[Clock] = None,
        metrics: Optional["MetricsCollector"] = None,
        fetch_timeout_s: Optional[float] = None,
        sweep_interval_s: Optional[float] = None,
        sweep_multiplier: float = 2.0,
    ):
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        self.ttl_ms = ttl_ms
        self.name = name
        self.fetch_timeout_s = fetch_timeout_s
        self.sweep_interval_s = sweep_interval_s
        self.sweep_multiplier = sweep_multiplier
        self.metrics = metrics
        self.logger = get_logger(f"launchpad.cache.{name}")

        self._clock: Clock = clock or epoch_ms
        self._entries: Dict[K, CacheEntry[K, V]] = {}
        self._inflight: Dict[K, "asyncio.Future[V]"] = {}
        self._sweep_task: Optional[asyncio.Task] = None

        self.hits = 0
        self.misses = 0
        self.joins = 0
        self.failures = 0

    async def get(
        self,
        key: K,
        fetch_fn: Callable[[], Awaitable[V]],
        ttl_ms: Optional[float] = None,
        *,
        force_bust: bool = False,
    ) -> V:
        """Return the fresh value for ``key``, fetching it at most once concurrently.

        Args:
            key: Cache key.
            fetch_fn: Zero-argument coroutine function producing the value.
            ttl_ms: Freshness window override for this lookup.
            force_bust: Drop any cached entry before looking up. A fetch that
                is already in flight is still joined.
        """
        ttl = self.ttl_ms if ttl_ms is None else ttl_ms

        if force_bust:
            self.invalidate(key)

        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.inserted_at_ms < ttl:
            self.hits += 1
            self._record("hit")
            return entry.value

        # No await between the lookup and the insert below, so two callers on
        # the same loop can never both start a fetch for one key.
        pending = self._inflight.get(key)
        if pending is not None:
            self.joins += 1
            self._record("join")
            return await asyncio.shield(pending)

        self.misses += 1
        self._record("miss")
        task = asyncio.ensure_future(self._fetch(key, fetch_fn, self._clock()))
        task.add_done_callback(_retrieve_exception)
        self._inflight[key] = task
        return await asyncio.shield(task)

    async def _fetch(self, key: K, fetch_fn: Callable[[], Awaitable[V]], started_at_ms: float) -> V:
        try:
            if self.fetch_timeout_s is not None:
                value = await asyncio.wait_for(fetch_fn(), timeout=self.fetch_timeout_s)
            else:
                value = await fetch_fn()
        except Exception as exc:
            self.failures += 1
            if self.metrics:
                self.metrics.record_cache_fetch_failure(self.name)
            self.logger.warning("Cache fetch failed", key=str(key), error=str(exc) or type(exc).__name__)
            raise
        else:
            self._entries[key] = CacheEntry(key=key, value=value, inserted_at_ms=started_at_ms)
            return value
        finally:
            self._inflight.pop(key, None)

    def peek(self, key: K, ttl_ms: Optional[float] = None) -> Optional[V]:
        """Return the cached value if still fresh, without fetching."""
        ttl = self.ttl_ms if ttl_ms is None else ttl_ms
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.inserted_at_ms < ttl:
            return entry.value
        return None

    def invalidate(self, key: K) -> bool:
        """Drop the cached entry for ``key``; in-flight fetches are unaffected."""
        if self._entries.pop(key, None) is not None:
            self.logger.debug("Invalidated cache key", key=str(key))
            return True
        return False

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self, max_age_ms: Optional[float] = None) -> int:
        """Remove entries older than ``max_age_ms`` (default: multiplier * TTL)."""
        limit = self.sweep_multiplier * self.ttl_ms if max_age_ms is None else max_age_ms
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.inserted_at_ms > limit]
        for key in expired:
            del self._entries[key]
        if expired:
            self.logger.debug("Swept expired cache entries", removed=len(expired))
        return len(expired)

    def start_sweeper(self) -> None:
        """Start the periodic sweep task if a sweep interval is configured."""
        if not self.sweep_interval_s:
            return
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop_sweeper(self) -> None:
        if self._sweep_task is not None and not self._sweep_task.done():
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
        self._sweep_task = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_s)
            self.sweep()

    def stats(self) -> Dict[str, Any]:
        lookups = self.hits + self.misses + self.joins
        return {
            "name": self.name,
            "size": len(self._entries),
            "inflight": len(self._inflight),
            "hits": self.hits,
            "misses": self.misses,
            "joins": self.joins,
            "failures": self.failures,
            "hit_ratio": self.hits / lookups if lookups else 0.0,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def _record(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(self.name, outcome)


def _retrieve_exception(task: "asyncio.Future[Any]") -> None:
    # Marks the exception as retrieved when every waiter was cancelled.
    if not task.cancelled():
        task.exception()
