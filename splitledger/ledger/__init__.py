"""Ledger store package."""

from splitledger.ledger.errors import LedgerError, NotFoundError, ValidationError
from splitledger.ledger.store import LedgerStore
from splitledger.ledger.validator import LedgerValidator

__all__ = [
    "LedgerError",
    "LedgerStore",
    "LedgerValidator",
    "NotFoundError",
    "ValidationError",
]
