"""
Data Models Package

This package contains all Pydantic models used in Split Ledger.
Every record held by the store and every derived value conforms to these schemas.
"""

from splitledger.models.ledger import (
    MAX_AMOUNT,
    BalanceStatus,
    Expense,
    ExpenseType,
    LedgerState,
    Person,
    Settlement,
    ValidationErrorKind,
    ValidationIssue,
)
from splitledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "MAX_AMOUNT",
    "BalanceStatus",
    "Expense",
    "ExpenseType",
    "LedgerState",
    "Person",
    "Settlement",
    "ValidationErrorKind",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
