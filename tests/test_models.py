"""
Tests for Split Ledger models

Test strategy:
1. Unit tests for individual components (models, store, planner, codec)
2. Integration tests for the session with in-memory collaborators
3. No real files outside pytest's tmp_path
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from splitledger.models.ledger import (
    Expense,
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


def make_expense(**overrides) -> Expense:
    fields = dict(
        id=10,
        description="Dinner",
        amount=Decimal("60.00"),
        expense_type="Food",
        expense_date=date(2024, 6, 1),
        paid_by=1,
        split_between=(1, 2),
    )
    fields.update(overrides)
    return Expense(**fields)


class TestLedgerModels:
    """Tests for ledger record models."""

    def test_person_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        person = Person(id=1, name="  Asha  ")
        assert person.name == "Asha"

    def test_person_is_immutable(self):
        """Test that records cannot be changed in place."""
        person = Person(id=1, name="Asha")
        with pytest.raises(ValueError):
            person.name = "Ravi"

    def test_expense_accepts_wire_names(self):
        """Test that the camelCase wire names populate the fields."""
        expense = Expense.model_validate({
            "id": 3,
            "description": "Taxi",
            "amount": "12.50",
            "type": "Transport",
            "date": "2024-06-02",
            "paidBy": 1,
            "splitBetween": [1, 2],
        })
        assert expense.expense_type == "Transport"
        assert expense.expense_date == date(2024, 6, 2)
        assert expense.paid_by == 1
        assert expense.split_between == (1, 2)
        assert expense.amount == Decimal("12.50")

    def test_expense_dumps_wire_names(self):
        """Test that aliases are used when dumping by alias."""
        dumped = make_expense().model_dump(by_alias=True)
        assert set(dumped) == {
            "id", "description", "amount", "type", "date", "paidBy", "splitBetween",
        }

    def test_expense_rejects_non_positive_amount(self):
        """Test that zero amounts are rejected."""
        with pytest.raises(ValueError):
            make_expense(amount=Decimal("0"))

    def test_expense_rejects_empty_split(self):
        """Test that an expense must be split with someone."""
        with pytest.raises(ValueError):
            make_expense(split_between=())

    def test_expense_involves(self):
        """Test payer and split member detection."""
        expense = make_expense(paid_by=3, split_between=(1, 2))
        assert expense.involves(3)
        assert expense.involves(2)
        assert not expense.involves(4)

    def test_settlement_aliases(self):
        """Test that settlements read 'from' and 'to'."""
        settlement = Settlement.model_validate({"from": 2, "to": 1, "amount": "20.00"})
        assert settlement.from_id == 2
        assert settlement.to_id == 1


class TestLedgerState:
    """Tests for LedgerState integrity checks."""

    def test_empty_state(self):
        """Test the default state is empty."""
        state = LedgerState()
        assert state.people == ()
        assert state.expenses == ()
        assert state.is_empty is True

    def test_valid_state(self):
        """Test a consistent state is accepted."""
        state = LedgerState(
            people=(Person(id=1, name="A"), Person(id=2, name="B")),
            expenses=(make_expense(),),
        )
        assert not state.is_empty

    def test_duplicate_person_id_rejected(self):
        with pytest.raises(ValueError, match="Duplicate person id"):
            LedgerState(people=(Person(id=1, name="A"), Person(id=1, name="B")))

    def test_duplicate_name_ignoring_case_rejected(self):
        with pytest.raises(ValueError, match="Duplicate person name"):
            LedgerState(people=(Person(id=1, name="Asha"), Person(id=2, name="ASHA")))

    def test_duplicate_expense_id_rejected(self):
        with pytest.raises(ValueError, match="Duplicate expense id"):
            LedgerState(
                people=(Person(id=1, name="A"), Person(id=2, name="B")),
                expenses=(make_expense(), make_expense()),
            )

    def test_unknown_payer_rejected(self):
        with pytest.raises(ValueError, match="paid by an unknown person"):
            LedgerState(
                people=(Person(id=2, name="B"),),
                expenses=(make_expense(paid_by=1, split_between=(2,)),),
            )

    def test_unknown_split_member_rejected(self):
        with pytest.raises(ValueError, match="split with an unknown person"):
            LedgerState(
                people=(Person(id=1, name="A"),),
                expenses=(make_expense(split_between=(1, 2)),),
            )

    def test_repeated_split_member_rejected(self):
        with pytest.raises(ValueError, match="repeats a split member"):
            LedgerState(
                people=(Person(id=1, name="A"), Person(id=2, name="B")),
                expenses=(make_expense(split_between=(1, 1)),),
            )


class TestValidationIssue:
    """Tests for ValidationIssue model."""

    def test_issue_dump(self):
        issue = ValidationIssue(
            field="amount",
            kind=ValidationErrorKind.NON_POSITIVE_AMOUNT,
            message="Please enter a valid positive amount",
        )
        dumped = issue.model_dump(mode="json")
        assert dumped["kind"] == "non_positive_amount"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.PERSON_ADDED,
            description="Asha added",
        )
        assert event.event_type == AuditEventType.PERSON_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
            entity_id=7,
            details={"description": "Dinner", "amount": "60.00"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == 7
        assert log_dict["details"]["amount"] == "60.00"

    def test_builder_person_deleted(self):
        """Test AuditEventBuilder.person_deleted records the cascade."""
        correlation_id = uuid4()
        event = AuditEventBuilder.person_deleted(
            person_id=1,
            name="Asha",
            removed_expense_ids=[4, 6],
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.PERSON_DELETED
        assert event.entity_id == 1
        assert event.details["removed_expense_ids"] == [4, 6]
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_state_saved_backup(self):
        """Test that backup saves get their own event type."""
        event = AuditEventBuilder.state_saved("backup", 120)
        assert event.event_type == AuditEventType.BACKUP_SAVED
        event = AuditEventBuilder.state_saved("storage", 120)
        assert event.event_type == AuditEventType.STATE_SAVED

    def test_builder_not_found_with_non_int_id(self):
        """Test that a non-integer id is kept only in the details."""
        event = AuditEventBuilder.not_found("delete_person", "person", "abc")
        assert event.entity_id is None
        assert event.details["requested_id"] == "'abc'"

    def test_builder_save_failed(self):
        event = AuditEventBuilder.save_failed("storage", "quota exceeded")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "quota exceeded"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
