from .ledger import FeeLedger, SkimEvent
from .skim import (
    FeeSchedule,
    PairSkim,
    SkimResult,
    apply_skim_bp,
    lamports_to_sol,
    sol_to_lamports,
    split_pair,
)

__all__ = [
    "FeeLedger",
    "SkimEvent",
    "FeeSchedule",
    "PairSkim",
    "SkimResult",
    "apply_skim_bp",
    "lamports_to_sol",
    "sol_to_lamports",
    "split_pair",
]
