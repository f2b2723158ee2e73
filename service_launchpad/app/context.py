"""
Application context: every cache, limiter, store and client the service uses.
"""

from dataclasses import dataclass
from typing import List, Optional

import httpx

from shared.config import BaseConfig
from shared.metrics import MetricsCollector
from .adapters.ai_client import AiTaglineClient
from .adapters.pool_discovery import PoolDiscovery
from .adapters.solana_rpc import SolanaRpcClient
from .caching.ttl_cache import TTLCache
from .canary.guard import CanaryGuard
from .commits.meta_store import CommitMetaStore
from .fees.ledger import FeeLedger
from .fees.skim import FeeSchedule
from .honest.status import HonestStatusService
from .meme.kit import MemeKitService
from .ratelimit.daily_gate import DailyGate
from .ratelimit.token_bucket import TokenBucketRateLimiter


@dataclass
class AppContext:
    config: BaseConfig
    rpc: SolanaRpcClient
    honest: HonestStatusService
    pools: PoolDiscovery
    fees: FeeSchedule
    ledger: FeeLedger
    canary: CanaryGuard
    commits: CommitMetaStore
    meme: MemeKitService

    @classmethod
    def from_config(
        cls,
        config: BaseConfig,
        metrics: Optional[MetricsCollector] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "AppContext":
        """Build a fresh, isolated set of instances from ``config``.

        ``http_client`` is shared by every upstream adapter when given, which
        lets tests route all outbound traffic through one mock transport.
        """
        rpc = SolanaRpcClient(
            config.rpc_endpoint,
            timeout=config.rpc_timeout_seconds,
            http_client=http_client,
        )

        honest_cache = TTLCache(config.honest_cache_ms, name="honest_status", metrics=metrics)
        pool_cache = TTLCache(
            config.pool_cache_ms,
            name="clmm_pools",
            metrics=metrics,
            sweep_interval_s=config.pool_sweep_interval_seconds,
        )
        tagline_cache = TTLCache(config.meme_kit_cache_ms, name="meme_taglines", metrics=metrics)

        meme = MemeKitService(
            endpoint_bucket=TokenBucketRateLimiter(
                config.meme_endpoint_limit,
                config.meme_endpoint_window_ms,
                name="meme_endpoint",
                metrics=metrics,
            ),
            ai_bucket=TokenBucketRateLimiter(
                config.meme_ai_limit,
                config.meme_ai_window_ms,
                name="meme_ai",
                metrics=metrics,
            ),
            # Read on every take so a config change applies without a restart.
            daily_gate=DailyGate(lambda: config.meme_ai_daily_max, name="meme_ai", metrics=metrics),
            cache=tagline_cache,
            ai_client=AiTaglineClient(
                config.openai_api_key,
                base_url=config.openai_base_url,
                model=config.openai_model,
                http_client=http_client,
            ),
        )

        return cls(
            config=config,
            rpc=rpc,
            honest=HonestStatusService(rpc, honest_cache),
            pools=PoolDiscovery(
                pool_cache,
                raydium_pools_url=config.raydium_pools_url,
                dexscreener_url=config.dexscreener_url,
                http_client=http_client,
            ),
            fees=FeeSchedule.from_config(config),
            ledger=FeeLedger(metrics=metrics),
            canary=CanaryGuard.from_config(config, rpc),
            commits=CommitMetaStore(),
            meme=meme,
        )

    def caches(self) -> List[TTLCache]:
        return [self.honest.cache, self.pools.cache, self.meme.cache]

    async def start(self) -> None:
        for cache in self.caches():
            cache.start_sweeper()

    async def close(self) -> None:
        for cache in self.caches():
            await cache.stop_sweeper()
        # Adapters may share one client; closing an already-closed httpx client is a no-op.
        await self.rpc.close()
        await self.pools.close()
        if self.meme.ai_client is not None:
            await self.meme.ai_client.close()
