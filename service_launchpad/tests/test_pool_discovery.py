"""
Unit tests for Raydium CLMM pool discovery.
"""

import httpx
import pytest

from service_launchpad.app.adapters.pool_discovery import USDC_MINT, PoolDiscovery
from service_launchpad.app.caching.ttl_cache import TTLCache
from shared.errors import ValidationError


TOKEN = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
POOL_ID = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
OTHER_POOL_ID = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"


class Upstream:
    """Routes mocked requests to canned Raydium and DexScreener responses."""

    def __init__(self, raydium=(200, {"data": []}), dexscreener=(200, {"pairs": []})):
        self.raydium = raydium
        self.dexscreener = dexscreener
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url.host)
        if request.url.host == "raydium.test":
            return httpx.Response(self.raydium[0], json=self.raydium[1])
        if request.url.host == "dex.test":
            assert request.url.path == f"/latest/dex/tokens/{TOKEN}"
            return httpx.Response(self.dexscreener[0], json=self.dexscreener[1])
        return httpx.Response(404)


def discovery(upstream: Upstream, clock) -> PoolDiscovery:
    return PoolDiscovery(
        TTLCache(600_000, name="clmm_pools", clock=clock),
        raydium_pools_url="https://raydium.test/pools",
        dexscreener_url="https://dex.test/latest/dex/",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
    )


class TestPoolDiscovery:
    """Test cases for PoolDiscovery."""

    @pytest.mark.asyncio
    async def test_finds_pool_in_raydium_list(self, clock):
        upstream = Upstream(raydium=(200, {"data": [
            {"id": OTHER_POOL_ID, "mintA": TOKEN, "mintB": "So11111111111111111111111111111111111111112"},
            {"id": POOL_ID, "mintA": USDC_MINT, "mintB": TOKEN},
        ]}))

        lookup = await discovery(upstream, clock).find_clmm_pool_id(TOKEN)

        assert lookup.found is True
        assert lookup.pool_id == POOL_ID
        assert lookup.source == "raydium"
        assert upstream.calls == ["raydium.test"]

    @pytest.mark.asyncio
    async def test_matches_base_and_quote_mint_fields(self, clock):
        upstream = Upstream(raydium=(200, {"data": [
            {"id": POOL_ID, "baseMint": TOKEN, "quoteMint": USDC_MINT},
        ]}))

        lookup = await discovery(upstream, clock).find_clmm_pool_id(TOKEN)
        assert lookup.pool_id == POOL_ID

    @pytest.mark.asyncio
    async def test_falls_back_to_dexscreener(self, clock):
        upstream = Upstream(
            raydium=(500, None),
            dexscreener=(200, {"pairs": [
                {
                    "dexId": "raydium",
                    "labels": ["AMM"],
                    "pairAddress": OTHER_POOL_ID,
                    "baseToken": {"address": TOKEN},
                    "quoteToken": {"address": USDC_MINT},
                },
                {
                    "dexId": "raydium",
                    "labels": ["CLMM"],
                    "pairAddress": POOL_ID,
                    "baseToken": {"address": TOKEN},
                    "quoteToken": {"address": USDC_MINT},
                },
            ]}),
        )

        lookup = await discovery(upstream, clock).find_clmm_pool_id(TOKEN)

        assert lookup.pool_id == POOL_ID
        assert lookup.source == "dexscreener"
        assert len(lookup.errors) == 1
        assert lookup.errors[0].startswith("raydium:")

    @pytest.mark.asyncio
    async def test_nested_raydium_payload(self, clock):
        upstream = Upstream(raydium=(200, {"data": {"count": 1, "data": [
            {"id": POOL_ID, "mintA": TOKEN, "mintB": USDC_MINT},
        ]}}))

        lookup = await discovery(upstream, clock).find_clmm_pool_id(TOKEN)

        assert lookup.pool_id == POOL_ID
        assert lookup.source == "raydium"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"data": {"data": {"id": POOL_ID}}},
            {"data": "pools"},
            {"data": ["not-a-pool", 42]},
            ["unexpected"],
        ],
    )
    async def test_malformed_raydium_payload_falls_back(self, clock, payload):
        upstream = Upstream(
            raydium=(200, payload),
            dexscreener=(200, {"pairs": [
                "junk",
                {"dexId": "raydium", "labels": "CLMM", "pairAddress": OTHER_POOL_ID},
                {
                    "dexId": "raydium",
                    "labels": ["CLMM"],
                    "pairAddress": POOL_ID,
                    "baseToken": "not-a-token",
                    "quoteToken": {"address": USDC_MINT},
                },
            ]}),
        )

        lookup = await discovery(upstream, clock).find_clmm_pool_id(TOKEN)

        assert lookup.pool_id == POOL_ID
        assert lookup.source == "dexscreener"
        assert upstream.calls == ["raydium.test", "dex.test"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"pairs": {"a": 1}}, {"pairs": None}, ["x"], "text"])
    async def test_malformed_dexscreener_payload_is_not_found(self, clock, payload):
        upstream = Upstream(dexscreener=(200, payload))

        lookup = await discovery(upstream, clock).find_clmm_pool_id(TOKEN)

        assert lookup.found is False

    @pytest.mark.asyncio
    async def test_not_found_is_cached(self, clock):
        upstream = Upstream()
        pools = discovery(upstream, clock)

        first = await pools.find_clmm_pool_id(TOKEN)
        second = await pools.find_clmm_pool_id(TOKEN)

        assert first.found is False
        assert first.pool_id is None
        assert second == first
        assert upstream.calls == ["raydium.test", "dex.test"]

    @pytest.mark.asyncio
    async def test_not_found_expires_after_ttl(self, clock):
        upstream = Upstream()
        pools = discovery(upstream, clock)

        await pools.find_clmm_pool_id(TOKEN)
        clock.advance(600_000)
        await pools.find_clmm_pool_id(TOKEN)

        assert len(upstream.calls) == 4

    @pytest.mark.asyncio
    async def test_bust_and_clear(self, clock):
        upstream = Upstream()
        pools = discovery(upstream, clock)

        await pools.find_clmm_pool_id(TOKEN)
        await pools.find_clmm_pool_id(TOKEN, bust=True)
        assert len(upstream.calls) == 4

        pools.clear(TOKEN)
        assert pools.cache.peek(PoolDiscovery.cache_key(TOKEN)) is None

    @pytest.mark.asyncio
    async def test_invalid_token_mint(self, clock):
        upstream = Upstream()

        with pytest.raises(ValidationError):
            await discovery(upstream, clock).find_clmm_pool_id("not-a-mint")
        assert upstream.calls == []

    def test_cache_key(self):
        assert PoolDiscovery.cache_key(TOKEN) == f"clmm_{TOKEN}"
