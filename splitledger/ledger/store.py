"""
Ledger Store

The single owner of a ledger's people and expenses, and the only thing
allowed to change them.

GUARANTEES:
- Every mutation is validated in full before anything changes
- A rejected call (ValidationError / NotFoundError) changes nothing
- A successful call swaps in new collections in one step, so no
  half-applied change is ever observable
- Ids come from a monotonic counter owned by the store and are never
  reused within a store's lifetime

The store is not thread-safe. A host that shares one store between
threads must serialise calls to it.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Union

from splitledger.ledger.errors import NotFoundError
from splitledger.ledger.validator import LedgerValidator
from splitledger.models.ledger import Expense, LedgerState, Person, Settlement
from splitledger.settlement import compute_balances, plan_settlements


class LedgerStore:
    """
    In-memory ledger of people and expenses.

    Create one per ledger and pass it to whatever needs it; there is
    no module-level ledger.
    """

    def __init__(
        self,
        state: Optional[LedgerState] = None,
        validator: Optional[LedgerValidator] = None,
    ):
        """
        Initialize the store.

        Args:
            state: Ledger content to start from. Empty if None.
            validator: Input validator. A default one is used if None.
        """
        state = state or LedgerState()
        self._people: tuple[Person, ...] = state.people
        self._expenses: tuple[Expense, ...] = state.expenses
        self._validator = validator or LedgerValidator()

        used_ids = [p.id for p in self._people] + [e.id for e in self._expenses]
        self._next_id = max(used_ids, default=0) + 1

    @classmethod
    def from_state(cls, state: LedgerState) -> "LedgerStore":
        return cls(state=state)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def people(self) -> tuple[Person, ...]:
        return self._people

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._expenses

    def snapshot(self) -> LedgerState:
        """The current ledger content as one immutable value."""
        return LedgerState(people=self._people, expenses=self._expenses)

    def get_person(self, person_id: int) -> Person:
        for person in self._people:
            if person.id == person_id:
                return person
        raise NotFoundError("person", person_id)

    def get_expense(self, expense_id: int) -> Expense:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        raise NotFoundError("expense", expense_id)

    def get_balances(self) -> dict[int, Decimal]:
        """Net balance per person id; empty when there is nothing to settle."""
        return compute_balances(self._people, self._expenses)

    def get_settlements(self) -> list[Settlement]:
        """Greedy settlement payments for the current balances."""
        return plan_settlements(self.get_balances())

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    def add_person(self, name: Any) -> Person:
        """
        Add a person.

        Raises:
            ValidationError: EMPTY_NAME or DUPLICATE_NAME
        """
        cleaned = self._validator.validate_name(name, self._people)
        person = Person(id=self._allocate_id(), name=cleaned)
        self._people = self._people + (person,)
        return person

    def rename_person(self, person_id: int, new_name: Any) -> Person:
        """
        Rename a person. The duplicate check ignores the person themself,
        so changing only the letter case of a name is allowed.

        Raises:
            NotFoundError: no such person
            ValidationError: EMPTY_NAME or DUPLICATE_NAME
        """
        current = self.get_person(person_id)
        cleaned = self._validator.validate_name(
            new_name, self._people, exclude_id=person_id
        )
        renamed = current.model_copy(update={"name": cleaned})
        self._people = tuple(
            renamed if p.id == person_id else p for p in self._people
        )
        return renamed

    def delete_person(self, person_id: int) -> tuple[Person, list[Expense]]:
        """
        Delete a person and every expense they paid for or share.

        Returns:
            (deleted person, removed expenses in ledger order)

        Raises:
            NotFoundError: no such person
        """
        person = self.get_person(person_id)
        removed = [e for e in self._expenses if e.involves(person_id)]

        people = tuple(p for p in self._people if p.id != person_id)
        expenses = tuple(e for e in self._expenses if not e.involves(person_id))
        self._people, self._expenses = people, expenses

        return person, removed

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        description: Any,
        amount: Any,
        expense_type: Any,
        expense_date: Union[date, str, None],
        paid_by: Any,
        split_between: Iterable[Any],
    ) -> Expense:
        """
        Add an expense split equally between split_between.

        Raises:
            ValidationError: the first failing check, see LedgerValidator
        """
        fields = self._validator.validate_expense(
            description, amount, expense_type, expense_date,
            paid_by, split_between, self._people,
        )
        expense = Expense(id=self._allocate_id(), **fields)
        self._expenses = self._expenses + (expense,)
        return expense

    def edit_expense(
        self,
        expense_id: int,
        description: Any,
        amount: Any,
        expense_type: Any,
        expense_date: Union[date, str, None],
        paid_by: Any,
        split_between: Iterable[Any],
    ) -> Expense:
        """
        Replace every field of an existing expense. The id is kept.

        Raises:
            NotFoundError: no such expense
            ValidationError: the first failing check, see LedgerValidator
        """
        self.get_expense(expense_id)
        fields = self._validator.validate_expense(
            description, amount, expense_type, expense_date,
            paid_by, split_between, self._people,
        )
        updated = Expense(id=expense_id, **fields)
        self._expenses = tuple(
            updated if e.id == expense_id else e for e in self._expenses
        )
        return updated

    def delete_expense(self, expense_id: int) -> Expense:
        """
        Delete one expense.

        Raises:
            NotFoundError: no such expense
        """
        expense = self.get_expense(expense_id)
        self._expenses = tuple(e for e in self._expenses if e.id != expense_id)
        return expense

    def _allocate_id(self) -> int:
        allocated = self._next_id
        self._next_id += 1
        return allocated
