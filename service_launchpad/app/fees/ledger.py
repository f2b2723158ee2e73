"""
In-memory fee ledger for skim and flat-fee events.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@dataclass(frozen=True)
class SkimEvent:
    """Fees taken from one liquidity commit."""

    mint: str
    owner: str
    skim_a: int
    skim_b: int
    flat_fee_lamports: int = 0
    txid: Optional[str] = None
    ts: float = field(default_factory=lambda: time.time() * 1000.0)


class FeeLedger:
    """Records skim events for revenue reporting.

    The ledger lives in process memory and resets on restart.
    """

    def __init__(self, metrics: Optional["MetricsCollector"] = None):
        self.metrics = metrics
        self.logger = get_logger("launchpad.fee_ledger")
        self._events: List[SkimEvent] = []

    def record(self, event: SkimEvent) -> SkimEvent:
        self._events.append(event)
        if self.metrics:
            if event.skim_a:
                self.metrics.record_skim_event("a")
            if event.skim_b:
                self.metrics.record_skim_event("b")
        self.logger.info(
            "Skim event recorded",
            mint=event.mint,
            skim_a=event.skim_a,
            skim_b=event.skim_b,
            flat_fee_lamports=event.flat_fee_lamports,
            txid=event.txid,
        )
        return event

    def events(self, mint: Optional[str] = None) -> List[SkimEvent]:
        if mint is None:
            return list(self._events)
        return [e for e in self._events if e.mint == mint]

    def revenue_summary(self) -> Dict[str, Any]:
        per_mint: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {"skim_a": 0, "skim_b": 0, "flat_fee_lamports": 0, "events": 0}
        )
        for event in self._events:
            totals = per_mint[event.mint]
            totals["skim_a"] += event.skim_a
            totals["skim_b"] += event.skim_b
            totals["flat_fee_lamports"] += event.flat_fee_lamports
            totals["events"] += 1

        return {
            "events": len(self._events),
            "total_flat_fee_lamports": sum(e.flat_fee_lamports for e in self._events),
            "per_mint": dict(per_mint),
        }

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(e) for e in self._events]
