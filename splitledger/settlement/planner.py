"""
Settlement Planning

Turns net balances into a list of "X pays Y" instructions using a
greedy two-pointer pairing of the largest debtor with the largest
creditor.

DESIGN DECISION: This is the raw greedy pairing, not a search for the
fewest possible transfers. Chains in the expense history (A owes B,
B owes C) are never modelled; only net balances matter.

Ordering is deterministic: debtors and creditors are each sorted by
descending magnitude, and equal magnitudes keep the order in which the
balances mapping lists them (people order, when it comes from
compute_balances).
"""

from decimal import Decimal
from typing import Mapping

from splitledger.models.ledger import Settlement
from splitledger.settlement.balances import round_currency

# Balances within a cent of zero count as settled
TOLERANCE = Decimal("0.01")


def plan_settlements(balances: Mapping[int, Decimal]) -> list[Settlement]:
    """
    Compute the settlement payments for a set of balances.

    Applying every returned settlement (subtract from `from_id`, add to
    `to_id`) brings every balance to within a cent of zero.
    """
    debtors = [[pid, -amount] for pid, amount in balances.items() if amount < -TOLERANCE]
    creditors = [[pid, amount] for pid, amount in balances.items() if amount > TOLERANCE]

    # list.sort is stable, including with reverse=True
    debtors.sort(key=lambda entry: entry[1], reverse=True)
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    settlements = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]
        amount = min(debtor[1], creditor[1])

        if amount > TOLERANCE:
            settlements.append(Settlement(
                from_id=debtor[0],
                to_id=creditor[0],
                amount=round_currency(amount),
            ))

        debtor[1] -= amount
        creditor[1] -= amount

        if debtor[1] <= TOLERANCE:
            i += 1
        if creditor[1] <= TOLERANCE:
            j += 1

    return settlements
