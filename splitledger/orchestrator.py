"""
Ledger Session for Split Ledger

This module ties the store, the codec and the storage/sharing
collaborators together into the object a UI talks to.

Flows:
1. Startup: share link token -> saved token -> empty ledger
2. Mutation: validate and apply in the store -> audit -> save token
3. Query: balances and settlements recomputed from the current ledger

DESIGN DECISION: Saving is fire-and-forget. A failed save (full disk,
quota exceeded) is logged and audited, and the in-memory ledger is
kept exactly as the mutation left it. Nothing is ever rolled back.
"""

import asyncio
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Iterator, Optional, Union
from uuid import UUID

from splitledger.audit import AuditLogger, create_correlation_id
from splitledger.codec import deserialize, serialize
from splitledger.config import get_settings
from splitledger.ledger import LedgerStore, NotFoundError, ValidationError
from splitledger.models.ledger import Expense, LedgerState, Person, Settlement
from splitledger.services.storage import (
    FileTokenStorage,
    ShareLinkInterface,
    StorageError,
    TokenStorageInterface,
    UrlShareLink,
)


class LedgerSession:
    """
    One open ledger plus the collaborators that save and share it.

    Every mutation goes through the store, so a rejected call raises
    ValidationError / NotFoundError and changes nothing. Calls must not
    be interleaved; a host that runs several threads must serialise
    them.
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        storage: Optional[TokenStorageInterface] = None,
        backup_storage: Optional[TokenStorageInterface] = None,
        share_link: Optional[ShareLinkInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store or LedgerStore()
        self._storage = storage
        self._backup_storage = backup_storage
        self._share_link = share_link
        self._audit_logger = audit_logger or AuditLogger()

    @classmethod
    def open(
        cls,
        reference: Optional[str] = None,
        storage: Optional[TokenStorageInterface] = None,
        backup_storage: Optional[TokenStorageInterface] = None,
        share_link: Optional[ShareLinkInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "LedgerSession":
        """
        Open a ledger at startup.

        A token carried by `reference` (a share link) wins over the
        saved token in `storage`. An undecodable token yields an empty
        ledger. A storage read error is logged and treated as no token.
        """
        audit_logger = audit_logger or AuditLogger()
        correlation_id = create_correlation_id()

        token = None
        source = "empty"
        if reference and share_link:
            token = share_link.extract(reference)
            if token:
                source = "share_link"

        if token is None and storage:
            try:
                token = storage.load()
            except StorageError as e:
                audit_logger.log_error(
                    error_type="storage_load_failed",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            if token:
                source = "storage"

        state = deserialize(token)
        audit_logger.log_state_loaded(
            source=source,
            people=len(state.people),
            expenses=len(state.expenses),
            correlation_id=correlation_id,
        )

        return cls(
            store=LedgerStore.from_state(state),
            storage=storage,
            backup_storage=backup_storage,
            share_link=share_link,
            audit_logger=audit_logger,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def people(self) -> tuple[Person, ...]:
        return self._store.people

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._store.expenses

    def snapshot(self) -> LedgerState:
        return self._store.snapshot()

    def get_balances(self) -> dict[int, Decimal]:
        return self._store.get_balances()

    def get_settlements(self) -> list[Settlement]:
        return self._store.get_settlements()

    def share_reference(self) -> str:
        """
        Build a share link carrying the whole ledger.

        Raises:
            RuntimeError: If no share link collaborator is configured
        """
        if self._share_link is None:
            raise RuntimeError("Sharing is not configured for this session")
        reference = self._share_link.embed(serialize(self.snapshot()))
        self._audit_logger.log_share_link_created(reference)
        return reference

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    def add_person(self, name: Any) -> Person:
        correlation_id = create_correlation_id()
        with self._audited("add_person", correlation_id):
            person = self._store.add_person(name)
        self._audit_logger.log_person_added(person.id, person.name, correlation_id)
        self._persist(correlation_id)
        return person

    def rename_person(self, person_id: int, new_name: Any) -> Person:
        correlation_id = create_correlation_id()
        with self._audited("rename_person", correlation_id):
            old_name = self._store.get_person(person_id).name
            person = self._store.rename_person(person_id, new_name)
        self._audit_logger.log_person_renamed(
            person.id, old_name, person.name, correlation_id
        )
        self._persist(correlation_id)
        return person

    def delete_person(self, person_id: int) -> tuple[Person, list[Expense]]:
        correlation_id = create_correlation_id()
        with self._audited("delete_person", correlation_id):
            person, removed = self._store.delete_person(person_id)
        self._audit_logger.log_person_deleted(
            person.id, person.name, [e.id for e in removed], correlation_id
        )
        self._persist(correlation_id)
        return person, removed

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        description: Any,
        amount: Any,
        expense_type: Any,
        expense_date: Union[date, str, None],
        paid_by: Any,
        split_between: Iterable[Any],
    ) -> Expense:
        correlation_id = create_correlation_id()
        with self._audited("add_expense", correlation_id):
            expense = self._store.add_expense(
                description, amount, expense_type, expense_date,
                paid_by, split_between,
            )
        self._audit_logger.log_expense_added(
            expense.id, expense.description, str(expense.amount), correlation_id
        )
        self._persist(correlation_id)
        return expense

    def edit_expense(
        self,
        expense_id: int,
        description: Any,
        amount: Any,
        expense_type: Any,
        expense_date: Union[date, str, None],
        paid_by: Any,
        split_between: Iterable[Any],
    ) -> Expense:
        correlation_id = create_correlation_id()
        with self._audited("edit_expense", correlation_id):
            expense = self._store.edit_expense(
                expense_id, description, amount, expense_type, expense_date,
                paid_by, split_between,
            )
        self._audit_logger.log_expense_updated(
            expense.id, expense.description, str(expense.amount), correlation_id
        )
        self._persist(correlation_id)
        return expense

    def delete_expense(self, expense_id: int) -> Expense:
        correlation_id = create_correlation_id()
        with self._audited("delete_expense", correlation_id):
            expense = self._store.delete_expense(expense_id)
        self._audit_logger.log_expense_deleted(
            expense.id, expense.description, correlation_id
        )
        self._persist(correlation_id)
        return expense

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def backup(self) -> bool:
        """
        Write the ledger to backup storage.

        Skipped (returns False) when there is no backup storage or the
        ledger is empty, so an empty session never overwrites a backup.
        """
        if self._backup_storage is None:
            return False
        state = self.snapshot()
        if state.is_empty:
            return False
        return self._save(self._backup_storage, "backup", serialize(state), None)

    def _persist(self, correlation_id: UUID) -> bool:
        if self._storage is None:
            return False
        return self._save(
            self._storage, "storage", serialize(self.snapshot()), correlation_id
        )

    def _save(
        self,
        storage: TokenStorageInterface,
        target: str,
        token: str,
        correlation_id: Optional[UUID],
    ) -> bool:
        try:
            saved = storage.save(token)
        except StorageError as e:
            self._audit_logger.log_save_failed(target, str(e), correlation_id)
            return False
        if saved:
            self._audit_logger.log_state_saved(target, len(token), correlation_id)
        return saved

    @contextmanager
    def _audited(self, operation: str, correlation_id: UUID) -> Iterator[None]:
        """Audit a rejected store call, then let the error propagate."""
        try:
            yield
        except ValidationError as e:
            self._audit_logger.log_validation_failed(
                operation=operation,
                kind=e.kind.value,
                issues=[issue.model_dump(mode="json") for issue in e.issues],
                correlation_id=correlation_id,
            )
            raise
        except NotFoundError as e:
            self._audit_logger.log_not_found(
                operation=operation,
                entity_type=e.entity_type,
                entity_id=e.entity_id,
                correlation_id=correlation_id,
            )
            raise


async def run_periodic_backup(
    session: LedgerSession,
    interval_seconds: float,
    stop_event: asyncio.Event,
) -> int:
    """
    Back the session up every interval until stop_event is set.

    This belongs to the host, not the engine: schedule it as a task next
    to whatever else the host runs. Returns the number of backups written.
    """
    written = 0
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            if session.backup():
                written += 1
    return written


def create_app_components(
    reference: Optional[str] = None,
    use_storage: bool = True,
) -> LedgerSession:
    """
    Factory function to open a session wired to the configured backends.

    Args:
        reference: Share link the app was opened with, if any
        use_storage: Whether to save to local files.
                    Set to False for throwaway sessions.
    """
    settings = get_settings()
    share_link = UrlShareLink(
        base_url=settings.sharing.base_url,
        query_param=settings.sharing.query_param,
    )

    storage = None
    backup_storage = None
    if use_storage:
        storage = FileTokenStorage(settings.storage.ledger_path)
        backup_storage = FileTokenStorage(settings.storage.backup_path)

    return LedgerSession.open(
        reference=reference,
        storage=storage,
        backup_storage=backup_storage,
        share_link=share_link,
    )
