"""
Unit tests for the mainnet canary guard.
"""

import math
from unittest.mock import AsyncMock, MagicMock

import pytest

from service_launchpad.app.adapters.solana_rpc import MintAuthorities
from service_launchpad.app.canary.guard import NATIVE_MINT, CanaryGuard
from shared.errors import CanaryError, ExternalServiceError


TOKEN = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
ALLOWED = "AllowedWallet1111111111111111111111111111111"


def guard(**overrides) -> CanaryGuard:
    settings = {
        "is_mainnet": True,
        "canary_mode": True,
        "allowed_wallets": [ALLOWED],
        "max_sol": 0.02,
        "max_token_ui": 50,
    }
    settings.update(overrides)
    return CanaryGuard(**settings)


class TestAssertAllowed:
    """Test cases for the UI-amount canary check."""

    def test_devnet_is_unrestricted(self):
        devnet = guard(is_mainnet=False, canary_mode=False, allowed_wallets=[])
        devnet.assert_allowed("AnyWallet", side_a_ui=1_000, side_b_ui=1_000_000)

    def test_mainnet_without_canary_mode(self):
        with pytest.raises(CanaryError) as exc_info:
            guard(canary_mode=False).assert_allowed(ALLOWED)

        assert exc_info.value.code == "MainnetDisabled"
        assert exc_info.value.status_code == 403

    def test_wallet_not_allow_listed(self):
        with pytest.raises(CanaryError) as exc_info:
            guard().assert_allowed("SomeoneElse")
        assert exc_info.value.code == "WalletNotAllowListed"

    def test_within_caps(self):
        guard().assert_allowed(ALLOWED, side_a_ui=0.02, side_b_ui=50)

    def test_side_a_cap(self):
        with pytest.raises(CanaryError) as exc_info:
            guard().assert_allowed(ALLOWED, side_a_ui=0.03)

        assert exc_info.value.code == "CapExceeded"
        assert exc_info.value.side == "A"
        assert exc_info.value.details == {"side": "A"}

    def test_side_b_cap(self):
        with pytest.raises(CanaryError) as exc_info:
            guard().assert_allowed(ALLOWED, side_a_ui=0.01, side_b_ui=50.5)
        assert exc_info.value.side == "B"


class TestEnforceCaps:
    """Test cases for the base-unit canary check."""

    @pytest.fixture
    def rpc(self):
        rpc = MagicMock()
        rpc.get_mint_authorities = AsyncMock(
            return_value=MintAuthorities(mint=TOKEN, mint_authority=None, freeze_authority=None, decimals=6)
        )
        return rpc

    @pytest.mark.asyncio
    async def test_within_caps(self, rpc):
        await guard(rpc=rpc).enforce_caps(ALLOWED, NATIVE_MINT, TOKEN, side_a_ui=0.02, side_b_ui=50)

    @pytest.mark.asyncio
    async def test_sol_side_over_cap(self, rpc):
        with pytest.raises(CanaryError) as exc_info:
            await guard(rpc=rpc).enforce_caps(ALLOWED, NATIVE_MINT, TOKEN, side_a_ui=0.021)
        assert exc_info.value.side == "A"

    @pytest.mark.asyncio
    async def test_token_side_over_cap(self, rpc):
        with pytest.raises(CanaryError) as exc_info:
            await guard(rpc=rpc).enforce_caps(ALLOWED, NATIVE_MINT, TOKEN, side_b_ui=50.5)
        assert exc_info.value.side == "B"

    @pytest.mark.asyncio
    async def test_devnet_skips_rpc(self, rpc):
        devnet = guard(is_mainnet=False, rpc=rpc)
        await devnet.enforce_caps("AnyWallet", NATIVE_MINT, TOKEN, side_a_ui=10, side_b_ui=10_000)
        rpc.get_mint_authorities.assert_not_called()

    @pytest.mark.asyncio
    async def test_ui_to_base_uses_mint_decimals(self, rpc):
        canary = guard(rpc=rpc)

        assert await canary.ui_to_base(NATIVE_MINT, 1.5) == 1_500_000_000
        assert await canary.ui_to_base(TOKEN, 2.5) == 2_500_000

    @pytest.mark.asyncio
    async def test_ui_to_base_rejects_bad_amounts(self, rpc):
        canary = guard(rpc=rpc)

        assert await canary.ui_to_base(TOKEN, -1) == 0
        assert await canary.ui_to_base(TOKEN, math.nan) == 0
        assert await canary.ui_to_base(TOKEN, math.inf) == 0

    @pytest.mark.asyncio
    async def test_decimals_fall_back_when_rpc_fails(self, rpc):
        rpc.get_mint_authorities.side_effect = ExternalServiceError("solana_rpc", "timeout")

        assert await guard(rpc=rpc).ui_to_base(TOKEN, 1) == 1_000_000

    @pytest.mark.asyncio
    async def test_decimals_fall_back_without_rpc(self):
        assert await guard().ui_to_base(TOKEN, 1) == 1_000_000


class TestCanaryConfig:
    def test_from_config(self, make_config):
        config = make_config(
            network="mainnet",
            canary_mode="1",
            canary_wallets=f"{ALLOWED}, Second111 ,",
            canary_max_sol=0.5,
        )
        canary = CanaryGuard.from_config(config)

        assert canary.is_mainnet is True
        assert canary.canary_mode is True
        assert canary.is_allowed_wallet("Second111")
        assert canary.status() == {
            "is_mainnet": True,
            "canary_mode": True,
            "max_sol": 0.5,
            "max_token_ui": 50.0,
            "allow_listed_wallets": 2,
        }

    def test_canary_mode_defaults_off(self, make_config):
        assert make_config().canary_mode is False
