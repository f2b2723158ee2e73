"""
Launch fee configuration and basis-point skim arithmetic.

All amounts are integers in base units (lamports for SOL, the mint's
smallest unit for SPL tokens). The same skim rate is applied to both sides
of a two-token liquidity operation.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, List, Optional

from shared.errors import ValidationError


BP_DENOMINATOR = 10_000
LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class SkimResult:
    net: int
    skim: int


@dataclass(frozen=True)
class PairSkim:
    a: SkimResult
    b: SkimResult
    bp: int


def apply_skim_bp(amount: int, bp: int) -> SkimResult:
    """Split ``amount`` into net and skim portions at ``bp`` basis points.

    ``skim = floor(amount * bp / 10000)`` and ``net = amount - skim``, so
    ``net + skim == amount`` always holds.

    Raises:
        ValidationError: If ``amount`` is negative or ``bp`` is outside [0, 10000].
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("amount must be an integer", details={"amount": str(amount)})
    if isinstance(bp, bool) or not isinstance(bp, int):
        raise ValidationError("bp must be an integer", details={"bp": str(bp)})
    if amount < 0:
        raise ValidationError("amount must be non-negative", details={"amount": amount})
    if not 0 <= bp <= BP_DENOMINATOR:
        raise ValidationError("bp must be between 0 and 10000", details={"bp": bp})

    skim = amount * bp // BP_DENOMINATOR
    return SkimResult(net=amount - skim, skim=skim)


def split_pair(amount_a: int, amount_b: int, bp: int) -> PairSkim:
    """Apply the same skim rate to both sides of a liquidity operation."""
    return PairSkim(a=apply_skim_bp(amount_a, bp), b=apply_skim_bp(amount_b, bp), bp=bp)


def sol_to_lamports(sol: float) -> int:
    """Convert SOL to lamports, rounding down."""
    lamports = (Decimal(str(sol)) * LAMPORTS_PER_SOL).to_integral_value(rounding=ROUND_FLOOR)
    return int(lamports)


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


@dataclass(frozen=True)
class FeeSchedule:
    """Launch fees: a flat SOL fee plus a skim on provided liquidity."""

    fee_wallet: Optional[str]
    flat_fee_sol: float
    skim_bp: int

    @classmethod
    def from_config(cls, config) -> "FeeSchedule":
        return cls(
            fee_wallet=config.resolved_fee_wallet,
            flat_fee_sol=max(0.0, float(config.launch_flat_fee_sol)),
            skim_bp=min(BP_DENOMINATOR, max(0, int(config.launch_skim_bp))),
        )

    @property
    def flat_fee_lamports(self) -> int:
        return sol_to_lamports(self.flat_fee_sol)

    def skim(self, amount: int) -> SkimResult:
        return apply_skim_bp(amount, self.skim_bp)

    def quote(self, amount_a: int, amount_b: int) -> Dict[str, Any]:
        """Fee summary for a two-sided liquidity commit."""
        pair = split_pair(amount_a, amount_b, self.skim_bp)
        return {
            "fee_wallet": self.fee_wallet,
            "flat_fee_sol": self.flat_fee_sol,
            "flat_fee_lamports": self.flat_fee_lamports,
            "skim_bp": self.skim_bp,
            "side_a": {"gross": amount_a, "net": pair.a.net, "skim": pair.a.skim},
            "side_b": {"gross": amount_b, "net": pair.b.net, "skim": pair.b.skim},
        }

    def validate(self) -> Dict[str, Any]:
        warnings: List[str] = []
        if not self.fee_wallet:
            warnings.append("No fee wallet configured - launches may fail")
        if self.flat_fee_sol > 1:
            warnings.append("Flat fee is high (>1 SOL) - consider reducing for user experience")
        if self.skim_bp > 1000:
            warnings.append("Skim percentage is high (>10%) - consider reducing for user experience")

        return {
            "is_valid": not warnings,
            "warnings": warnings,
            "config": {
                "fee_wallet": self.fee_wallet,
                "flat_fee_sol": self.flat_fee_sol,
                "skim_bp": self.skim_bp,
            },
        }
