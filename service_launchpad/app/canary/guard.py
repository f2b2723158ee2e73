"""
Mainnet canary guard.

On mainnet, liquidity commits are blocked unless canary mode is on; with
canary mode on, only allow-listed wallets may commit and each side of the
commit is capped. Devnet is unrestricted.
"""

import math
from typing import Any, Dict, List, Optional

from shared.errors import CanaryError, LaunchpadException
from shared.logging import get_logger
from ..adapters.solana_rpc import SolanaRpcClient


NATIVE_MINT = "So11111111111111111111111111111111111111112"
SOL_DECIMALS = 9
FALLBACK_DECIMALS = 6


class CanaryGuard:
    def __init__(
        self,
        *,
        is_mainnet: bool,
        canary_mode: bool,
        allowed_wallets: List[str],
        max_sol: float,
        max_token_ui: float,
        rpc: Optional[SolanaRpcClient] = None,
    ):
        self.is_mainnet = is_mainnet
        self.canary_mode = canary_mode
        self.allowed_wallets = set(allowed_wallets)
        self.max_sol = max_sol
        self.max_token_ui = max_token_ui
        self.rpc = rpc
        self.logger = get_logger("launchpad.canary")

    @classmethod
    def from_config(cls, config, rpc: Optional[SolanaRpcClient] = None) -> "CanaryGuard":
        return cls(
            is_mainnet=config.is_mainnet,
            canary_mode=config.canary_mode,
            allowed_wallets=config.canary_wallet_list,
            max_sol=config.canary_max_sol,
            max_token_ui=config.canary_max_token_ui,
            rpc=rpc,
        )

    def is_allowed_wallet(self, owner: str) -> bool:
        return owner in self.allowed_wallets

    def _check_wallet(self, owner: str) -> bool:
        """Return False when no restriction applies (devnet)."""
        if not self.is_mainnet:
            return False
        if not self.canary_mode:
            raise CanaryError(
                "MainnetDisabled",
                "Mainnet commits are disabled. Set CANARY_MODE=1 to enable for allow-listed wallets.",
            )
        if not self.is_allowed_wallet(owner):
            self.logger.warning("Canary rejected wallet", owner=owner)
            raise CanaryError("WalletNotAllowListed", "This wallet is not in the mainnet test allow-list.")
        return True

    def assert_allowed(self, owner: str, side_a_ui: Optional[float] = None, side_b_ui: Optional[float] = None) -> None:
        """Best-effort check on UI amounts."""
        if not self._check_wallet(owner):
            return

        if side_a_ui is not None and side_a_ui > self.max_sol:
            raise CanaryError(
                "CapExceeded",
                f"Side A amount ({side_a_ui}) exceeds canary limit ({self.max_sol} SOL).",
                side="A",
            )
        if side_b_ui is not None and side_b_ui > self.max_token_ui:
            raise CanaryError(
                "CapExceeded",
                f"Side B amount ({side_b_ui}) exceeds canary limit ({self.max_token_ui} tokens).",
                side="B",
            )

    async def enforce_caps(
        self,
        owner: str,
        mint_a: str,
        mint_b: str,
        side_a_ui: Optional[float] = None,
        side_b_ui: Optional[float] = None,
    ) -> None:
        """Same rules as ``assert_allowed`` but compared in on-chain base units."""
        if not self._check_wallet(owner):
            return

        if side_a_ui is not None:
            cap = await self.ui_to_base(mint_a, self.max_sol)
            if await self.ui_to_base(mint_a, side_a_ui) > cap:
                raise CanaryError(
                    "CapExceeded",
                    f"Side A amount ({side_a_ui}) exceeds canary limit ({self.max_sol} SOL).",
                    side="A",
                )
        if side_b_ui is not None:
            cap = await self.ui_to_base(mint_b, self.max_token_ui)
            if await self.ui_to_base(mint_b, side_b_ui) > cap:
                raise CanaryError(
                    "CapExceeded",
                    f"Side B amount ({side_b_ui}) exceeds canary limit ({self.max_token_ui} tokens).",
                    side="B",
                )

    async def ui_to_base(self, mint: str, ui_amount: float) -> int:
        """Convert a UI amount to base units using the mint's decimals."""
        if not math.isfinite(ui_amount) or ui_amount < 0:
            return 0
        if mint == NATIVE_MINT:
            decimals = SOL_DECIMALS
        else:
            decimals = await self._mint_decimals(mint)
        return math.floor(ui_amount * 10 ** decimals)

    async def _mint_decimals(self, mint: str) -> int:
        if self.rpc is None:
            return FALLBACK_DECIMALS
        try:
            return (await self.rpc.get_mint_authorities(mint)).decimals
        except LaunchpadException as exc:
            self.logger.warning("Mint decimals lookup failed, assuming 6", mint=mint, error=exc.message)
            return FALLBACK_DECIMALS

    def status(self) -> Dict[str, Any]:
        return {
            "is_mainnet": self.is_mainnet,
            "canary_mode": self.canary_mode,
            "max_sol": self.max_sol,
            "max_token_ui": self.max_token_ui,
            "allow_listed_wallets": len(self.allowed_wallets),
        }
