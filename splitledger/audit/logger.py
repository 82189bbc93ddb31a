"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of changes to a shared ledger
2. Debugging capability when a saved ledger fails to load
3. Visibility of background save failures the user never sees

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from splitledger.models.audit import AuditEvent, AuditEventBuilder
from splitledger.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("splitledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_person_added(
        self,
        person_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.person_added(person_id, name, correlation_id))

    def log_person_renamed(
        self,
        person_id: int,
        old_name: str,
        new_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.person_renamed(
            person_id, old_name, new_name, correlation_id
        ))

    def log_person_deleted(
        self,
        person_id: int,
        name: str,
        removed_expense_ids: list[int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a person deletion and the expenses it cascaded to."""
        self.log(AuditEventBuilder.person_deleted(
            person_id, name, removed_expense_ids, correlation_id
        ))

    def log_expense_added(
        self,
        expense_id: int,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id, description, amount, correlation_id
        ))

    def log_expense_updated(
        self,
        expense_id: int,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id, description, amount, correlation_id
        ))

    def log_expense_deleted(
        self,
        expense_id: int,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id, description, correlation_id
        ))

    def log_validation_failed(
        self,
        operation: str,
        kind: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected mutation."""
        self.log(AuditEventBuilder.validation_failed(
            operation, kind, issues, correlation_id
        ))

    def log_not_found(
        self,
        operation: str,
        entity_type: str,
        entity_id: object,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.not_found(
            operation, entity_type, entity_id, correlation_id
        ))

    def log_state_loaded(
        self,
        source: str,
        people: int,
        expenses: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.state_loaded(
            source, people, expenses, correlation_id
        ))

    def log_state_saved(
        self,
        target: str,
        token_length: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.state_saved(target, token_length, correlation_id))

    def log_save_failed(
        self,
        target: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed save. The in-memory ledger is unaffected."""
        self.log(AuditEventBuilder.save_failed(target, error_message, correlation_id))

    def log_share_link_created(
        self,
        reference: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.share_link_created(reference, correlation_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding an expense).
    Pass it through all subsequent operations.
    """
    return uuid4()
