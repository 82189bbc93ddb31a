"""
Core Data Models for Split Ledger

These models define the records held by the ledger store and the
values derived from them. They are designed to:
1. Be immutable - the store replaces whole records, never fields
2. Serialize to the wire names used in saved and shared tokens
3. Reject a structurally broken ledger when one is decoded

DESIGN DECISION: Python attribute names are snake_case, while the JSON
field names (aliases) keep the camelCase names of the shared token format
(paidBy, splitBetween). Both names are accepted when building a model.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

# Largest accepted expense amount. Balances over any realistic ledger stay
# well inside the default 28-digit decimal context.
AMOUNT_DIGITS = 14
MAX_AMOUNT = Decimal("999999999999.99")


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseType(str, Enum):
    """
    Suggested expense categories offered by the UI.

    The store accepts any non-empty label; these are only defaults.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    ACCOMMODATION = "Accommodation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    UTILITIES = "Utilities"
    OTHER = "Other"


class ValidationErrorKind(str, Enum):
    """
    Why a mutation was rejected.

    Expense checks run in the order listed here; the first failing
    check decides the kind that is raised.
    """
    EMPTY_NAME = "empty_name"
    DUPLICATE_NAME = "duplicate_name"
    EMPTY_DESCRIPTION = "empty_description"
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    MISSING_TYPE = "missing_type"
    MISSING_DATE = "missing_date"
    UNKNOWN_PAYER = "unknown_payer"
    EMPTY_SPLIT = "empty_split"
    UNKNOWN_SPLIT_MEMBER = "unknown_split_member"


class BalanceStatus(str, Enum):
    """Where a person stands once balances are rounded."""
    OWED = "owed"        # balance > 0.01, others should pay them
    OWES = "owes"        # balance < -0.01, they should pay others
    SETTLED = "settled"  # within 0.01 of zero


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Person(BaseModel):
    """A participant in the ledger."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(..., ge=1, description="Store-allocated identifier")
    name: str = Field(..., min_length=1, description="Display name, unique ignoring case")


class Expense(BaseModel):
    """
    A single shared expense.

    The amount is split equally between every id in split_between.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: int = Field(..., ge=1, description="Store-allocated identifier")
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=AMOUNT_DIGITS,
        decimal_places=2,
        description="Amount at currency scale, at most MAX_AMOUNT",
    )
    expense_type: str = Field(..., min_length=1, alias="type")
    expense_date: date = Field(..., alias="date")
    paid_by: int = Field(..., alias="paidBy")
    split_between: tuple[int, ...] = Field(..., min_length=1, alias="splitBetween")

    def involves(self, person_id: int) -> bool:
        """True if the person paid for or shares this expense."""
        return self.paid_by == person_id or person_id in self.split_between


class LedgerState(BaseModel):
    """
    The full content of a ledger at a point in time.

    This is what gets serialized for storage and sharing. Decoding a
    state re-checks the invariants the store maintains, so a restored
    ledger is always one the store could have produced.
    """
    model_config = ConfigDict(frozen=True)

    people: tuple[Person, ...] = Field(default_factory=tuple)
    expenses: tuple[Expense, ...] = Field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.people and not self.expenses

    @model_validator(mode='after')
    def validate_integrity(self) -> 'LedgerState':
        """Validate identifier uniqueness, name uniqueness and references."""
        person_ids = [p.id for p in self.people]
        if len(set(person_ids)) != len(person_ids):
            raise ValueError("Duplicate person id in ledger")

        names = [p.name.casefold() for p in self.people]
        if len(set(names)) != len(names):
            raise ValueError("Duplicate person name in ledger")

        expense_ids = [e.id for e in self.expenses]
        if len(set(expense_ids)) != len(expense_ids):
            raise ValueError("Duplicate expense id in ledger")

        known = set(person_ids)
        for expense in self.expenses:
            if expense.paid_by not in known:
                raise ValueError(f"Expense {expense.id} is paid by an unknown person")
            if len(set(expense.split_between)) != len(expense.split_between):
                raise ValueError(f"Expense {expense.id} repeats a split member")
            if not set(expense.split_between) <= known:
                raise ValueError(f"Expense {expense.id} is split with an unknown person")

        return self


# =============================================================================
# DERIVED VALUES
# =============================================================================

class Settlement(BaseModel):
    """One directed payment that closes part of the net imbalance."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_id: int = Field(..., alias="from")
    to_id: int = Field(..., alias="to")
    amount: Decimal = Field(..., gt=0)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in a proposed change."""

    field: str = Field(
        ...,
        description="Input field with the issue"
    )
    kind: ValidationErrorKind = Field(
        ...,
        description="Which rule was broken"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
