"""
Audit Models for Split Ledger

Every change to the ledger is logged for audit purposes.
This provides:
1. Traceability of who-added-what in a shared ledger
2. Debugging information when a saved ledger fails to load
3. A record of persistence failures that never reach the user

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger mutation and persistence step has its own event type.
    """
    # People
    PERSON_ADDED = "person_added"
    PERSON_RENAMED = "person_renamed"
    PERSON_DELETED = "person_deleted"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Rejections
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"

    # Persistence and sharing
    STATE_LOADED = "state_loaded"
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"
    BACKUP_SAVED = "backup_saved"
    SHARE_LINK_CREATED = "share_link_created"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity ('person', 'expense', 'ledger')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Store id of the record this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one mutation and its save)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.person_added(person_id, name, correlation_id)
        event = AuditEventBuilder.save_failed("ledger", error, correlation_id)
    """

    @staticmethod
    def person_added(
        person_id: int,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_ADDED,
            entity_type="person",
            entity_id=person_id,
            correlation_id=correlation_id,
            description=f"{name} added",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def person_renamed(
        person_id: int,
        old_name: str,
        new_name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_RENAMED,
            entity_type="person",
            entity_id=person_id,
            correlation_id=correlation_id,
            description=f"{old_name} renamed to {new_name}",
            details={"old_name": old_name, "new_name": new_name},
            is_user_action=True,
        )

    @staticmethod
    def person_deleted(
        person_id: int,
        name: str,
        removed_expense_ids: list[int],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_DELETED,
            entity_type="person",
            entity_id=person_id,
            correlation_id=correlation_id,
            description=f"{name} and {len(removed_expense_ids)} expense(s) deleted",
            details={
                "name": name,
                "removed_expense_ids": removed_expense_ids,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_added(
        expense_id: int,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {description} - {amount}",
            details={"description": description, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: int,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense updated: {description} - {amount}",
            details={"description": description, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: int,
        description: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense deleted: {description}",
            details={"description": description},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        operation: str,
        kind: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {kind}",
            error_code=kind,
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def not_found(
        operation: str,
        entity_type: str,
        entity_id: Any,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id if isinstance(entity_id, int) else None,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {entity_type} {entity_id!r} not found",
            error_code="not_found",
            details={"operation": operation, "requested_id": repr(entity_id)},
        )

    @staticmethod
    def state_loaded(
        source: str,
        people: int,
        expenses: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger loaded from {source}",
            details={
                "source": source,
                "people": people,
                "expenses": expenses,
            },
        )

    @staticmethod
    def state_saved(
        target: str,
        token_length: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.BACKUP_SAVED
            if target == "backup"
            else AuditEventType.STATE_SAVED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger saved to {target}",
            details={"target": target, "token_length": token_length},
        )

    @staticmethod
    def save_failed(
        target: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Saving ledger to {target} failed",
            error_message=error_message,
            details={"target": target},
        )

    @staticmethod
    def share_link_created(
        reference: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_LINK_CREATED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="Share link created",
            details={"reference_length": len(reference)},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
