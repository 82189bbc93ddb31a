"""
Ledger Input Validation

DESIGN DECISION: Every rule is checked, in a fixed order, before a
mutation is applied. The first failing rule decides the error kind;
the rest are kept as extra issues for the caller to display.

Expense checks run in this order:
1. description present
2. amount is a positive number, at most MAX_AMOUNT
3. type present
4. date present and a real calendar date
5. payer exists
6. split is non-empty
7. every split member exists

IMPORTANT: Validation never silently fixes issues beyond normalising
whitespace, collapsing repeated split ids and rounding the amount to
cents.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional

from splitledger.ledger.errors import ValidationError
from splitledger.models.ledger import (
    MAX_AMOUNT,
    Person,
    ValidationErrorKind,
    ValidationIssue,
)
from splitledger.settlement.balances import round_currency


def _text(value: Any) -> str:
    """Normalise free text input; None becomes empty."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip()


def _parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse an amount to cents. Returns None if it isn't a finite number.

    Amounts above MAX_AMOUNT come back unrounded for the caller to reject.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        # str() first so floats keep their displayed value (0.1 -> 0.10)
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        if abs(amount) > MAX_AMOUNT:
            return amount
        return round_currency(amount)
    except (InvalidOperation, ValueError):
        return None


def _parse_date(value: Any) -> Optional[date]:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _parse_id(value: Any) -> Optional[int]:
    """Person ids are ints; digit strings from form fields are accepted."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _raise_first(issues: list[ValidationIssue]) -> None:
    if issues:
        first = issues[0]
        raise ValidationError(first.kind, first.message, issues)


class LedgerValidator:
    """
    Validates proposed people and expenses against the current ledger.

    The validator never mutates anything; it returns normalised values
    ready to be stored, or raises ValidationError.
    """

    def validate_name(
        self,
        name: Any,
        people: Iterable[Person],
        exclude_id: Optional[int] = None,
    ) -> str:
        """
        Check a person name and return it trimmed.

        Names must be non-empty and unique ignoring case. When renaming,
        pass the person's own id as exclude_id.
        """
        cleaned = _text(name)
        issues = []

        if not cleaned:
            issues.append(ValidationIssue(
                field="name",
                kind=ValidationErrorKind.EMPTY_NAME,
                message="Please enter a name",
            ))
        elif any(
            p.id != exclude_id and p.name.casefold() == cleaned.casefold()
            for p in people
        ):
            issues.append(ValidationIssue(
                field="name",
                kind=ValidationErrorKind.DUPLICATE_NAME,
                message=f"Person with the name '{cleaned}' already exists",
            ))

        _raise_first(issues)
        return cleaned

    def validate_expense(
        self,
        description: Any,
        amount: Any,
        expense_type: Any,
        expense_date: Any,
        paid_by: Any,
        split_between: Any,
        people: Iterable[Person],
    ) -> dict[str, Any]:
        """
        Check every expense field and return the normalised values.

        Returns a dict keyed by Expense field name (without id).
        """
        known = {p.id for p in people}
        issues = []

        cleaned_description = _text(description)
        if not cleaned_description:
            issues.append(ValidationIssue(
                field="description",
                kind=ValidationErrorKind.EMPTY_DESCRIPTION,
                message="Please enter a description",
            ))

        cleaned_amount = _parse_amount(amount)
        if cleaned_amount is None or cleaned_amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                kind=ValidationErrorKind.NON_POSITIVE_AMOUNT,
                message="Please enter a valid positive amount",
            ))
        elif cleaned_amount > MAX_AMOUNT:
            issues.append(ValidationIssue(
                field="amount",
                kind=ValidationErrorKind.NON_POSITIVE_AMOUNT,
                message=f"Amount must not exceed {MAX_AMOUNT:,}",
            ))

        cleaned_type = _text(expense_type)
        if not cleaned_type:
            issues.append(ValidationIssue(
                field="type",
                kind=ValidationErrorKind.MISSING_TYPE,
                message="Please select an expense type",
            ))

        cleaned_date = _parse_date(expense_date)
        if cleaned_date is None:
            issues.append(ValidationIssue(
                field="date",
                kind=ValidationErrorKind.MISSING_DATE,
                message="Please select a date",
            ))

        payer = _parse_id(paid_by)
        if payer is None or payer not in known:
            issues.append(ValidationIssue(
                field="paid_by",
                kind=ValidationErrorKind.UNKNOWN_PAYER,
                message="Please select who paid",
            ))

        members: list[Optional[int]] = []
        if isinstance(split_between, Iterable) and not isinstance(
            split_between, (str, bytes)
        ):
            for raw in split_between:
                member = _parse_id(raw)
                if member not in members:
                    members.append(member)

        if not members:
            issues.append(ValidationIssue(
                field="split_between",
                kind=ValidationErrorKind.EMPTY_SPLIT,
                message="Please select at least one person to split between",
            ))
        elif any(m is None or m not in known for m in members):
            issues.append(ValidationIssue(
                field="split_between",
                kind=ValidationErrorKind.UNKNOWN_SPLIT_MEMBER,
                message="Some selected people no longer exist",
            ))

        _raise_first(issues)

        return {
            "description": cleaned_description,
            "amount": cleaned_amount,
            "expense_type": cleaned_type,
            "expense_date": cleaned_date,
            "paid_by": payer,
            "split_between": tuple(members),
        }
