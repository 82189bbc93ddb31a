"""
Storage Services Package

Provides abstract interfaces and concrete implementations for saving
and sharing ledger tokens. Backends are swappable.
"""

from splitledger.services.storage.interface import (
    AuditStorageInterface,
    ShareLinkInterface,
    StorageError,
    TokenStorageInterface,
    TokenTooLargeError,
)
from splitledger.services.storage.local import (
    FileTokenStorage,
    InMemoryAuditStorage,
    InMemoryTokenStorage,
)
from splitledger.services.storage.sharing import UrlShareLink

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ShareLinkInterface",
    "TokenStorageInterface",
    # Exceptions
    "StorageError",
    "TokenTooLargeError",
    # Implementations
    "FileTokenStorage",
    "InMemoryAuditStorage",
    "InMemoryTokenStorage",
    "UrlShareLink",
]
