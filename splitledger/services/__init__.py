"""Services package."""

from splitledger.services.storage import (
    AuditStorageInterface,
    FileTokenStorage,
    InMemoryAuditStorage,
    InMemoryTokenStorage,
    ShareLinkInterface,
    StorageError,
    TokenStorageInterface,
    TokenTooLargeError,
    UrlShareLink,
)

__all__ = [
    "AuditStorageInterface",
    "FileTokenStorage",
    "InMemoryAuditStorage",
    "InMemoryTokenStorage",
    "ShareLinkInterface",
    "StorageError",
    "TokenStorageInterface",
    "TokenTooLargeError",
    "UrlShareLink",
]
