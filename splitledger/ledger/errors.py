"""
Ledger Errors

Two kinds of failure surface from store mutations:
- ValidationError: the input was rejected
- NotFoundError: the referenced id does not exist

In both cases the store is left exactly as it was.
"""

from typing import Optional

from splitledger.models.ledger import ValidationErrorKind, ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """
    A proposed change broke a ledger rule.

    `kind` is the first failing check; `issues` lists every problem
    found, in check order, so a form can show them all at once.
    """

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        issues: Optional[list[ValidationIssue]] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.issues = issues or []


class NotFoundError(LedgerError):
    """Referenced person or expense is not in the ledger."""

    def __init__(self, entity_type: str, entity_id: object):
        super().__init__(f"{entity_type.capitalize()} {entity_id!r} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id
