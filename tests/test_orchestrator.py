"""
Integration tests for LedgerSession with in-memory collaborators.
"""

import asyncio
from typing import Optional

import pytest
from datetime import date
from decimal import Decimal

from splitledger.audit import AuditLogger
from splitledger.codec import deserialize, serialize
from splitledger.ledger import LedgerStore, NotFoundError, ValidationError
from splitledger.models.audit import AuditEventType
from splitledger.models.ledger import LedgerState
from splitledger.orchestrator import LedgerSession, run_periodic_backup
from splitledger.services.storage import (
    InMemoryAuditStorage,
    InMemoryTokenStorage,
    StorageError,
    TokenStorageInterface,
    UrlShareLink,
)


class BrokenStorage(TokenStorageInterface):
    """Storage whose every call fails."""

    def save(self, token: str) -> bool:
        raise StorageError("disk full")

    def load(self) -> Optional[str]:
        raise StorageError("disk unreadable")


def sample_state() -> LedgerState:
    store = LedgerStore()
    store.add_person("Asha")
    store.add_person("Ravi")
    store.add_expense("Rent", "100", "Accommodation", date(2024, 5, 1), 1, [1, 2])
    store.add_expense("Groceries", "40", "Food", date(2024, 5, 2), 2, [1, 2])
    return store.snapshot()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


def event_types(audit_storage: InMemoryAuditStorage) -> list[AuditEventType]:
    return [e.event_type for e in reversed(audit_storage.get_recent_events(limit=1000))]


class TestOpen:
    """Tests for startup restore precedence."""

    def test_share_link_wins_over_storage(self, audit_logger):
        link = UrlShareLink("https://ledger.example.com/")
        shared = sample_state()
        storage = InMemoryTokenStorage(token=serialize(LedgerState()))

        session = LedgerSession.open(
            reference=link.embed(serialize(shared)),
            storage=storage,
            share_link=link,
            audit_logger=audit_logger,
        )
        assert session.snapshot() == shared

    def test_falls_back_to_storage(self, audit_logger, audit_storage):
        link = UrlShareLink("https://ledger.example.com/")
        saved = sample_state()
        session = LedgerSession.open(
            reference="https://ledger.example.com/",
            storage=InMemoryTokenStorage(token=serialize(saved)),
            share_link=link,
            audit_logger=audit_logger,
        )
        assert session.snapshot() == saved
        loaded = audit_storage.get_recent_events()[0]
        assert loaded.event_type == AuditEventType.STATE_LOADED
        assert loaded.details["source"] == "storage"

    def test_corrupt_storage_gives_empty_ledger(self):
        session = LedgerSession.open(storage=InMemoryTokenStorage(token="garbage!!"))
        assert session.snapshot() == LedgerState()

    def test_nothing_saved(self):
        assert LedgerSession.open().snapshot() == LedgerState()

    def test_unreadable_storage(self, audit_logger, audit_storage):
        session = LedgerSession.open(storage=BrokenStorage(), audit_logger=audit_logger)
        assert session.snapshot() == LedgerState()
        assert AuditEventType.SYSTEM_ERROR in event_types(audit_storage)

    def test_restored_session_continues_ids(self):
        session = LedgerSession.open(storage=InMemoryTokenStorage(token=serialize(sample_state())))
        assert session.add_person("Meera").id == 5


class TestMutations:
    """Tests for mutations, persistence and auditing."""

    def test_each_mutation_is_saved(self, audit_logger):
        storage = InMemoryTokenStorage()
        session = LedgerSession(storage=storage, audit_logger=audit_logger)

        asha = session.add_person("Asha")
        ravi = session.add_person("Ravi")
        session.add_expense("Rent", "100", "Accommodation", "2024-05-01", asha.id, [asha.id, ravi.id])

        assert storage.save_count == 3
        assert deserialize(storage.load()) == session.snapshot()

    def test_rent_and_groceries_scenario(self):
        session = LedgerSession(store=LedgerStore.from_state(sample_state()))
        assert session.get_balances() == {1: Decimal("30"), 2: Decimal("-30")}
        settlements = session.get_settlements()
        assert [(s.from_id, s.to_id, s.amount) for s in settlements] == [(2, 1, Decimal("30"))]

    def test_rejected_mutation_is_audited_and_not_saved(self, audit_logger, audit_storage):
        storage = InMemoryTokenStorage()
        session = LedgerSession(storage=storage, audit_logger=audit_logger)
        session.add_person("Asha")

        with pytest.raises(ValidationError):
            session.add_person("ASHA")

        assert storage.save_count == 1
        failed = audit_storage.get_recent_events()[0]
        assert failed.event_type == AuditEventType.VALIDATION_FAILED
        assert failed.error_code == "duplicate_name"
        assert failed.details["issues"][0]["field"] == "name"

    def test_not_found_is_audited(self, audit_logger, audit_storage):
        session = LedgerSession(audit_logger=audit_logger)
        before = session.snapshot()
        with pytest.raises(NotFoundError):
            session.delete_expense(7)
        assert session.snapshot() == before
        assert audit_storage.get_recent_events()[0].event_type == AuditEventType.NOT_FOUND

    def test_save_failure_keeps_state(self, audit_logger, audit_storage):
        """Test that a failed save never rolls back the mutation."""
        session = LedgerSession(storage=BrokenStorage(), audit_logger=audit_logger)
        person = session.add_person("Asha")

        assert session.people == (person,)
        assert AuditEventType.SAVE_FAILED in event_types(audit_storage)

    def test_quota_exceeded_keeps_state(self):
        storage = InMemoryTokenStorage(max_size=10)
        session = LedgerSession(storage=storage)
        session.add_person("Asha")
        assert len(session.people) == 1
        assert storage.load() is None

    def test_full_lifecycle(self, audit_logger, audit_storage):
        session = LedgerSession(storage=InMemoryTokenStorage(), audit_logger=audit_logger)
        asha = session.add_person("Asha")
        ravi = session.add_person("Ravi")
        meera = session.add_person("Meera")
        dinner = session.add_expense("Dinner", 60, "Food", date(2024, 6, 1), asha.id, [asha.id, ravi.id, meera.id])
        session.edit_expense(dinner.id, "Dinner", 90, "Food", date(2024, 6, 1), asha.id, [asha.id, ravi.id, meera.id])
        session.rename_person(meera.id, "Meera K")
        session.delete_person(ravi.id)

        assert session.expenses == ()
        assert session.get_settlements() == []
        assert event_types(audit_storage) == [
            AuditEventType.PERSON_ADDED, AuditEventType.STATE_SAVED,
            AuditEventType.PERSON_ADDED, AuditEventType.STATE_SAVED,
            AuditEventType.PERSON_ADDED, AuditEventType.STATE_SAVED,
            AuditEventType.EXPENSE_ADDED, AuditEventType.STATE_SAVED,
            AuditEventType.EXPENSE_UPDATED, AuditEventType.STATE_SAVED,
            AuditEventType.PERSON_RENAMED, AuditEventType.STATE_SAVED,
            AuditEventType.PERSON_DELETED, AuditEventType.STATE_SAVED,
        ]


class TestSharingAndBackup:
    """Tests for share links and backups."""

    def test_share_reference_roundtrip(self):
        link = UrlShareLink("https://ledger.example.com/")
        session = LedgerSession(store=LedgerStore.from_state(sample_state()), share_link=link)
        reopened = LedgerSession.open(reference=session.share_reference(), share_link=link)
        assert reopened.snapshot() == session.snapshot()

    def test_reads_are_not_audited(self, audit_logger, audit_storage):
        """Test that only building a link records a share event."""
        link = UrlShareLink("https://ledger.example.com/")
        session = LedgerSession(
            store=LedgerStore.from_state(sample_state()),
            share_link=link,
            audit_logger=audit_logger,
        )
        session.snapshot()
        session.get_balances()
        session.get_settlements()
        assert event_types(audit_storage) == []

        session.share_reference()
        assert event_types(audit_storage) == [AuditEventType.SHARE_LINK_CREATED]

    def test_share_without_link(self):
        with pytest.raises(RuntimeError):
            LedgerSession().share_reference()

    def test_backup_skips_empty_ledger(self):
        backup = InMemoryTokenStorage()
        session = LedgerSession(backup_storage=backup)
        assert session.backup() is False
        assert backup.load() is None

    def test_backup_writes_token(self):
        backup = InMemoryTokenStorage()
        session = LedgerSession(store=LedgerStore.from_state(sample_state()), backup_storage=backup)
        assert session.backup() is True
        assert deserialize(backup.load()) == session.snapshot()

    def test_backup_failure_is_absorbed(self):
        session = LedgerSession(store=LedgerStore.from_state(sample_state()), backup_storage=BrokenStorage())
        assert session.backup() is False

    def test_periodic_backup(self):
        backup = InMemoryTokenStorage()
        session = LedgerSession(store=LedgerStore.from_state(sample_state()), backup_storage=backup)

        async def scenario() -> int:
            stop = asyncio.Event()
            task = asyncio.create_task(run_periodic_backup(session, 0.01, stop))
            await asyncio.sleep(0.1)
            stop.set()
            return await task

        written = asyncio.run(scenario())
        assert written >= 1
        assert backup.save_count == written

    def test_periodic_backup_stops_immediately(self):
        session = LedgerSession(backup_storage=InMemoryTokenStorage())

        async def scenario() -> int:
            stop = asyncio.Event()
            stop.set()
            return await run_periodic_backup(session, 60, stop)

        assert asyncio.run(scenario()) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
