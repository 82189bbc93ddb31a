"""Balance and settlement calculation package."""

from splitledger.settlement.balances import (
    CENT,
    compute_balances,
    round_currency,
)
from splitledger.settlement.planner import TOLERANCE, plan_settlements

__all__ = [
    "CENT",
    "TOLERANCE",
    "compute_balances",
    "plan_settlements",
    "round_currency",
]
