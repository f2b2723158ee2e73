"""
Last liquidity-commit metadata per token mint.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from shared.logging import get_logger


@dataclass(frozen=True)
class CommitMeta:
    txid: str
    ts: float
    whirlpool: Optional[str] = None
    tick_lower: Optional[int] = None
    tick_upper: Optional[int] = None


class CommitMetaStore:
    """Keeps the most recent commit per mint; later saves replace earlier ones."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or (lambda: time.time() * 1000.0)
        self._records: Dict[str, CommitMeta] = {}
        self.logger = get_logger("launchpad.commit_meta")

    def save(
        self,
        mint: str,
        txid: str,
        *,
        whirlpool: Optional[str] = None,
        tick_lower: Optional[int] = None,
        tick_upper: Optional[int] = None,
    ) -> CommitMeta:
        record = CommitMeta(
            txid=txid,
            ts=self._clock(),
            whirlpool=whirlpool,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
        )
        self._records[mint] = record
        self.logger.info("Saved commit metadata", mint=mint[:8], txid=txid)
        return record

    def get(self, mint: str) -> Optional[CommitMeta]:
        return self._records.get(mint)

    def all(self) -> Dict[str, CommitMeta]:
        return dict(self._records)

    def clear(self, mint: str) -> bool:
        return self._records.pop(mint, None) is not None

    def count(self) -> int:
        return len(self._records)
