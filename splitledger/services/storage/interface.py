"""
Abstract Storage Interfaces

DESIGN DECISION: The ledger never talks to a storage backend directly.
It hands opaque tokens to small collaborators defined here. This allows us to:
1. Use in-memory storage for testing
2. Save to a local file (or anything else) in production
3. Share a ledger through a link without the engine knowing about URLs

The interfaces are intentionally tiny - a ledger is saved and loaded
as one token, never record by record.
"""

from abc import ABC, abstractmethod
from typing import Optional

from splitledger.models.audit import AuditEvent


class TokenStorageInterface(ABC):
    """
    Durable home for the latest ledger token.

    Saving is best effort: callers treat a failed save as recoverable
    and keep their in-memory ledger.
    """

    @abstractmethod
    def save(self, token: str) -> bool:
        """
        Store a token, replacing any previous one.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def load(self) -> Optional[str]:
        """
        Return the last saved token, or None if nothing was saved.

        Raises:
            StorageError: If the read fails
        """
        pass


class ShareLinkInterface(ABC):
    """
    Embeds a token into a reference someone else can open, and
    recovers the same token from such a reference.
    """

    @abstractmethod
    def embed(self, token: str) -> str:
        """Build a shareable reference carrying the token."""
        pass

    @abstractmethod
    def extract(self, reference: str) -> Optional[str]:
        """Return the token carried by a reference, unchanged, or None."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class TokenTooLargeError(StorageError):
    """The backend refused a token for being over its size limit."""
    pass
