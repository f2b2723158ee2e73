"""
Raydium CLMM pool discovery for TOKEN/USDC pairs.

Lookups go to the Raydium public pool list first and fall back to
DexScreener. Both outcomes, including "no pool", are cached as regular
values so that repeated misses do not hammer the upstream APIs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from shared.logging import get_logger
from ..caching.ttl_cache import TTLCache
from .solana_rpc import is_valid_pubkey, validate_pubkey


USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

RAYDIUM_TIMEOUT_SECONDS = 15.0
DEXSCREENER_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class PoolLookup:
    """Outcome of a pool search; ``pool_id`` is None when nothing was found."""

    token_mint: str
    pool_id: Optional[str]
    source: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.pool_id is not None


class PoolDiscovery:
    """Finds and caches the Raydium CLMM pool pairing a token with USDC."""

    def __init__(
        self,
        cache: TTLCache,
        *,
        raydium_pools_url: str,
        dexscreener_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.cache = cache
        self.raydium_pools_url = raydium_pools_url
        self.dexscreener_url = dexscreener_url.rstrip("/")
        self.logger = get_logger("launchpad.pool_discovery")
        self._client = http_client or httpx.AsyncClient()

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def cache_key(token_mint: str) -> str:
        return f"clmm_{token_mint}"

    async def find_clmm_pool_id(self, token_mint: str, *, bust: bool = False) -> PoolLookup:
        validate_pubkey(token_mint)
        return await self.cache.get(
            self.cache_key(token_mint),
            lambda: self._discover(token_mint),
            force_bust=bust,
        )

    def clear(self, token_mint: Optional[str] = None) -> None:
        if token_mint is None:
            self.cache.clear()
        else:
            self.cache.invalidate(self.cache_key(token_mint))

    async def _discover(self, token_mint: str) -> PoolLookup:
        errors: List[str] = []

        pools = await self._fetch_raydium_pools(errors)
        pool_id = self._match_raydium_pool(pools, token_mint)
        if pool_id and is_valid_pubkey(pool_id):
            self.logger.info("Found CLMM pool via Raydium API", token_mint=token_mint, pool_id=pool_id)
            return PoolLookup(token_mint=token_mint, pool_id=pool_id, source="raydium", errors=errors)
        if pool_id:
            self.logger.warning("Raydium returned an invalid pool id", pool_id=pool_id)

        pool_id = await self._find_via_dexscreener(token_mint, errors)
        if pool_id and is_valid_pubkey(pool_id):
            self.logger.info("Found CLMM pool via DexScreener", token_mint=token_mint, pool_id=pool_id)
            return PoolLookup(token_mint=token_mint, pool_id=pool_id, source="dexscreener", errors=errors)

        self.logger.info("No CLMM pool found", token_mint=token_mint, errors=errors)
        return PoolLookup(token_mint=token_mint, pool_id=None, errors=errors)

    async def _fetch_raydium_pools(self, errors: List[str]) -> List[Dict[str, Any]]:
        try:
            response = await self._client.get(self.raydium_pools_url, timeout=RAYDIUM_TIMEOUT_SECONDS)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self.logger.warning("Raydium pool list fetch failed", error=str(exc) or type(exc).__name__)
            errors.append(f"raydium: {exc or type(exc).__name__}")
            return []
        data = body.get("data") if isinstance(body, dict) else None
        # Newer Raydium responses nest the list one level deeper.
        if isinstance(data, dict):
            data = data.get("data")
        if not isinstance(data, list):
            self.logger.warning("Unexpected Raydium pool list shape", payload_type=type(data).__name__)
            errors.append("raydium: unexpected payload")
            return []
        return [pool for pool in data if isinstance(pool, dict)]

    @staticmethod
    def _match_raydium_pool(pools: List[Dict[str, Any]], token_mint: str) -> Optional[str]:
        token = token_mint.lower()
        usdc = USDC_MINT.lower()
        for pool in pools:
            base = str(pool.get("mintA") or pool.get("baseMint") or "").lower()
            quote = str(pool.get("mintB") or pool.get("quoteMint") or "").lower()
            if {base, quote} == {token, usdc} and pool.get("id"):
                return pool["id"]
        return None

    async def _find_via_dexscreener(self, token_mint: str, errors: List[str]) -> Optional[str]:
        try:
            response = await self._client.get(
                f"{self.dexscreener_url}/tokens/{token_mint}",
                headers={"Accept": "application/json"},
                timeout=DEXSCREENER_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self.logger.warning("DexScreener lookup failed", error=str(exc) or type(exc).__name__)
            errors.append(f"dexscreener: {exc or type(exc).__name__}")
            return None

        usdc = USDC_MINT.lower()
        pairs = body.get("pairs") if isinstance(body, dict) else None
        if not isinstance(pairs, list):
            return None
        for pair in pairs:
            if not isinstance(pair, dict):
                continue
            if "raydium" not in str(pair.get("dexId", "")).lower():
                continue
            labels = pair.get("labels")
            if not isinstance(labels, list) or "CLMM" not in labels:
                continue
            addresses = {_token_address(pair.get("baseToken")), _token_address(pair.get("quoteToken"))}
            if usdc in addresses and pair.get("pairAddress"):
                return pair["pairAddress"]
        return None


def _token_address(token: Any) -> str:
    if not isinstance(token, dict):
        return ""
    return str(token.get("address") or "").lower()
