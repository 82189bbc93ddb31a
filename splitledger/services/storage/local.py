"""
Local Storage Backends

In-memory and file-based implementations of the storage interfaces.
FileTokenStorage plays the role browser local storage plays for a
web page: one small file holding the latest token.
"""

from pathlib import Path
from typing import Optional, Union

import structlog

from splitledger.models.audit import AuditEvent
from splitledger.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
    TokenStorageInterface,
    TokenTooLargeError,
)

logger = structlog.get_logger(__name__)


class InMemoryTokenStorage(TokenStorageInterface):
    """Keeps the token in memory. Used by tests and throwaway sessions."""

    def __init__(self, token: Optional[str] = None, max_size: Optional[int] = None):
        """
        Args:
            token: Token to start with, as if previously saved
            max_size: Reject tokens longer than this (simulates a quota)
        """
        self._token = token
        self._max_size = max_size
        self.save_count = 0

    def save(self, token: str) -> bool:
        if self._max_size is not None and len(token) > self._max_size:
            raise TokenTooLargeError(
                f"Token of {len(token)} characters exceeds quota of {self._max_size}"
            )
        self._token = token
        self.save_count += 1
        return True

    def load(self) -> Optional[str]:
        return self._token


class FileTokenStorage(TokenStorageInterface):
    """
    Stores the token in a single UTF-8 text file.

    The file is written to a sibling temp file first and then moved
    into place, so a crash mid-write never leaves a truncated token.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    def save(self, token: str) -> bool:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(token, encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Could not write {self._path}: {e}") from e

        logger.debug("token_saved", path=str(self._path), token_length=len(token))
        return True

    def load(self) -> Optional[str]:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {self._path}: {e}") from e

        return token or None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only in-memory audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
