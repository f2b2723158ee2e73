"""
Sliding-window token bucket rate limiter for the Launchpad service.
"""

from collections import deque
from typing import Any, Deque, Dict, Optional, TYPE_CHECKING

from fastapi import Request

from shared.errors import ValidationError
from shared.logging import get_logger
from ..caching.ttl_cache import Clock, epoch_ms

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


UNKNOWN_CLIENT_ID = "unknown"


class TokenBucketRateLimiter:
    """Per-identifier limiter: at most ``limit`` accepted takes in any ``window_ms``.

    Each identifier keeps the timestamps of its accepted takes. Timestamps at
    or before ``now - window_ms`` are pruned lazily on every take, which is
    what bounds the history; ``cleanup()`` additionally forgets identifiers
    whose history has emptied out.
    """

    def __init__(
        self,
        limit: int,
        window_ms: int,
        *,
        name: str = "default",
        clock: Optional[Clock] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        if limit <= 0:
            raise ValueError("limit must be a positive integer")
        if window_ms <= 0:
            raise ValueError("window_ms must be a positive integer")
        self.limit = limit
        self.window_ms = window_ms
        self.name = name
        self.metrics = metrics
        self.logger = get_logger(f"launchpad.rate_limiter.{name}")
        self._clock: Clock = clock or epoch_ms
        self._buckets: Dict[str, Deque[float]] = {}

    def take(self, identifier: str) -> bool:
        """Record a request for ``identifier``; return whether it is allowed."""
        if not identifier:
            raise ValidationError(
                "Rate limit identifier is required",
                details={"limiter": self.name},
            )

        now = self._clock()
        timestamps = self._buckets.get(identifier)
        if timestamps is None:
            timestamps = self._buckets[identifier] = deque()

        self._prune(timestamps, now)

        if len(timestamps) >= self.limit:
            self.logger.warning(
                "Rate limit exceeded",
                identifier=identifier,
                limit=self.limit,
                window_ms=self.window_ms,
            )
            if self.metrics:
                self.metrics.record_rate_limit_denial(self.name)
            return False

        timestamps.append(now)
        return True

    def remaining(self, identifier: str) -> int:
        """Takes still available to ``identifier`` in the current window."""
        timestamps = self._buckets.get(identifier)
        if not timestamps:
            return self.limit
        self._prune(timestamps, self._clock())
        return max(0, self.limit - len(timestamps))

    def reset(self, identifier: str) -> bool:
        return self._buckets.pop(identifier, None) is not None

    def cleanup(self) -> int:
        """Forget identifiers with no accepted take inside the window."""
        now = self._clock()
        stale = []
        for identifier, timestamps in self._buckets.items():
            self._prune(timestamps, now)
            if not timestamps:
                stale.append(identifier)
        for identifier in stale:
            del self._buckets[identifier]
        return len(stale)

    def stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "limit": self.limit,
            "window_ms": self.window_ms,
            "identifiers": len(self._buckets),
        }

    def _prune(self, timestamps: Deque[float], now: float) -> None:
        cutoff = now - self.window_ms
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()


def resolve_client_id(request: Request, policy: str = "unknown-bucket") -> str:
    """Extract the caller identifier from proxy headers or the socket peer.

    ``policy`` decides what happens when nothing is resolvable: either every
    such caller shares the distinct ``"unknown"`` bucket, or the request is
    rejected with a ``ValidationError``.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    if policy == "reject":
        raise ValidationError("Unable to identify client for rate limiting", code="UNIDENTIFIED_CLIENT")
    return UNKNOWN_CLIENT_ID
