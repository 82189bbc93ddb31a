"""
Ledger Queries

Read-only views over a ledger, shaped for display: expense lists,
per-person balance lines, settlements with names, spend per type.

DESIGN DECISION: Queries work on one LedgerState snapshot, so every
line of one view comes from the same ledger even if the UI mutates
the session between renders.
"""

import html
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from splitledger.models.ledger import (
    BalanceStatus,
    Expense,
    LedgerState,
    Person,
)
from splitledger.settlement import TOLERANCE, compute_balances, plan_settlements


class BalanceLine(BaseModel):
    """One person's row in the balance summary."""

    person: Person
    balance: Decimal
    status: BalanceStatus


class SettlementLine(BaseModel):
    """A settlement with both sides resolved to people."""

    payer: Person
    payee: Person
    amount: Decimal

    @property
    def text(self) -> str:
        return f"{self.payer.name} pays {self.payee.name}"


def format_currency(amount: Decimal, symbol: str = "₹") -> str:
    """
    Render an amount for display, e.g. Decimal("1234.5") -> "₹1,234.50".

    Negative amounts keep their sign in front of the symbol.
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def balance_markup(line: BalanceLine, symbol: str = "₹") -> str:
    """
    HTML for one balance row, styled by the status CSS class.

    Names come from shared links, so everything user supplied is escaped.
    """
    prefix = "+" if line.status == BalanceStatus.OWED else ""
    amount = html.escape(f"{prefix}{format_currency(line.balance, symbol)}")
    return (
        f"{html.escape(line.person.name)}: "
        f"<span class='{line.status.value}'>{amount}</span>"
    )


class LedgerQueries:
    """
    Answers display questions about one ledger snapshot.

    GUARANTEES:
    - Never modifies the ledger
    - Balances and settlements match LedgerStore.get_balances /
      get_settlements for the same content
    """

    def __init__(self, state: LedgerState):
        self._state = state
        self._people_by_id = {p.id: p for p in state.people}

    def person_name(self, person_id: int) -> Optional[str]:
        person = self._people_by_id.get(person_id)
        return person.name if person else None

    def list_expenses(self, newest_first: bool = True) -> list[Expense]:
        """Expenses by date; equal dates keep ledger order."""
        return sorted(
            self._state.expenses,
            key=lambda e: e.expense_date,
            reverse=newest_first,
        )

    def expenses_for_person(self, person_id: int) -> list[Expense]:
        """Expenses the person paid for or shares, in ledger order."""
        return [e for e in self._state.expenses if e.involves(person_id)]

    def balance_summary(self) -> list[BalanceLine]:
        """
        One line per person, in people order.

        Empty when there are no expenses, matching compute_balances.
        """
        balances = compute_balances(self._state.people, self._state.expenses)
        lines = []
        for person in self._state.people:
            if person.id not in balances:
                continue
            balance = balances[person.id]
            if balance > TOLERANCE:
                status = BalanceStatus.OWED
            elif balance < -TOLERANCE:
                status = BalanceStatus.OWES
            else:
                status = BalanceStatus.SETTLED
            lines.append(BalanceLine(person=person, balance=balance, status=status))
        return lines

    def settlement_lines(self) -> list[SettlementLine]:
        """Settlements in planner order, resolved to people."""
        balances = compute_balances(self._state.people, self._state.expenses)
        return [
            SettlementLine(
                payer=self._people_by_id[s.from_id],
                payee=self._people_by_id[s.to_id],
                amount=s.amount,
            )
            for s in plan_settlements(balances)
        ]

    def total_by_type(self) -> dict[str, Decimal]:
        """Total spend per expense type, types in first-seen order."""
        totals: dict[str, Decimal] = {}
        for expense in self._state.expenses:
            totals[expense.expense_type] = (
                totals.get(expense.expense_type, Decimal("0")) + expense.amount
            )
        return totals

    def total_spent(self) -> Decimal:
        return sum((e.amount for e in self._state.expenses), Decimal("0"))
