"""
"Honest launch" status: a token is honest when both its mint and freeze
authorities have been revoked.
"""

import asyncio
from typing import List, Optional

from pydantic import BaseModel

from shared.errors import LaunchpadException
from shared.logging import get_logger
from ..adapters.solana_rpc import SolanaRpcClient, is_valid_pubkey
from ..caching.ttl_cache import TTLCache


class HonestStatus(BaseModel):
    mint: str
    mint_null: bool
    freeze_null: bool
    is_honest: bool
    error: Optional[str] = None


class HonestStatusService:
    """Reads honest status from chain, cached per mint.

    Upstream failures are reported inside the returned status (``error`` set,
    ``is_honest`` False) rather than raised, and that status is cached like
    any other so a broken mint does not trigger an RPC call per request.
    """

    def __init__(self, rpc: SolanaRpcClient, cache: TTLCache):
        self.rpc = rpc
        self.cache = cache
        self.logger = get_logger("launchpad.honest_status")

    async def read_fresh(self, mint: str) -> HonestStatus:
        if not is_valid_pubkey(mint):
            return self._error_status(mint, "invalid-mint")

        try:
            authorities = await self.rpc.get_mint_authorities(mint)
        except LaunchpadException as exc:
            self.logger.warning("Honest status read failed", mint=mint, error=exc.message)
            return self._error_status(mint, exc.message or "read-failed")

        mint_null = authorities.mint_authority is None
        freeze_null = authorities.freeze_authority is None
        return HonestStatus(
            mint=mint,
            mint_null=mint_null,
            freeze_null=freeze_null,
            is_honest=mint_null and freeze_null,
        )

    async def read_cached(self, mint: str, *, bust: bool = False) -> HonestStatus:
        return await self.cache.get(mint, lambda: self.read_fresh(mint), force_bust=bust)

    async def read_many(self, mints: List[str], *, bust: bool = False) -> List[HonestStatus]:
        """Read several mints concurrently; blanks and duplicates are dropped, order kept."""
        unique = list(dict.fromkeys(m for m in mints if m))
        return list(await asyncio.gather(*(self.read_cached(m, bust=bust) for m in unique)))

    def invalidate(self, mint: str) -> bool:
        return self.cache.invalidate(mint)

    @staticmethod
    def _error_status(mint: str, error: str) -> HonestStatus:
        return HonestStatus(mint=mint, mint_null=False, freeze_null=False, is_honest=False, error=error)
