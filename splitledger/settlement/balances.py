"""
Balance Calculation

A person's balance is what they paid minus their share of what was
spent. Positive means others owe them; negative means they owe.

Shares are plain Decimal division (no remainder redistribution).
Rounding to cents happens once per person after every expense has
been accumulated, so rounding error never compounds across expenses.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from splitledger.models.ledger import Expense, Person

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero. Never returns -0.00."""
    rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    return rounded if rounded else ZERO


def compute_balances(
    people: Sequence[Person],
    expenses: Sequence[Expense],
) -> dict[int, Decimal]:
    """
    Net balance per person id, in people order.

    Returns an empty mapping when there are no people or no expenses.
    Every expense must reference people in `people`; the store
    guarantees this.
    """
    if not people or not expenses:
        return {}

    totals = {person.id: Decimal(0) for person in people}

    for expense in expenses:
        share = expense.amount / len(expense.split_between)
        totals[expense.paid_by] += expense.amount
        for member in expense.split_between:
            totals[member] -= share

    return {person_id: round_currency(total) for person_id, total in totals.items()}
