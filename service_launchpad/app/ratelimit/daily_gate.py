"""
Process-wide daily quota gate, reset at the UTC day boundary.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


def current_utc_day() -> str:
    """Current UTC day as ``YYYY-MM-DD``."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class DailyGateStats:
    day: str
    count: int


class DailyGate:
    """Counts units consumed today against a maximum read on every take.

    The day rolls over lazily inside ``take()``; ``stats()`` reports the
    stored state as-is. A maximum of zero or less disables the gate.
    """

    def __init__(
        self,
        get_max: Callable[[], int],
        *,
        name: str = "daily",
        today_fn: Callable[[], str] = current_utc_day,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self._get_max = get_max
        self._today = today_fn
        self.name = name
        self.metrics = metrics
        self.logger = get_logger(f"launchpad.daily_gate.{name}")
        self.day = today_fn()
        self.count = 0

    def take(self) -> bool:
        today = self._today()
        if today != self.day:
            self.logger.info("Daily gate rolled over", previous_day=self.day, day=today, used=self.count)
            self.day = today
            self.count = 0

        maximum = self._get_max()
        if maximum <= 0 or self.count >= maximum:
            if self.metrics:
                self.metrics.record_daily_gate(self.name, self.count, allowed=False)
            return False

        self.count += 1
        if self.metrics:
            self.metrics.record_daily_gate(self.name, self.count, allowed=True)
        return True

    def stats(self) -> DailyGateStats:
        return DailyGateStats(day=self.day, count=self.count)

    @property
    def maximum(self) -> int:
        return self._get_max()
