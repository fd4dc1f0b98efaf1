"""
Expense Repository

Owns the in-memory expense collection for the current (mode, user) scope
and applies mutations to whichever backend the storage context selects.

GUARANTEES:
- load() never raises: a failed read is logged and yields an empty collection
- memory only changes after the backend confirms a mutation
- new expenses appear at the head of the collection (most recent first)
- import replaces the collection; it never merges
"""

import datetime as dt
from typing import Optional, Union

import structlog

from expense_tracker.audit import ActivityLogger
from expense_tracker.models.activity import ActivityEventBuilder
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseExport,
    ExpenseUpdate,
)
from expense_tracker.models.results import Statistics
from expense_tracker.queries.statistics import calculate_statistics
from expense_tracker.services.storage.context import StorageContext
from expense_tracker.services.storage.interface import (
    ImportFormatError,
    StorageError,
)
from expense_tracker.services.storage.local_store import (
    export_expenses,
    parse_expenses_document,
)


logger = structlog.get_logger(__name__)


class ExpenseRepository:
    """
    Single entry point the UI uses for expenses.

    Amount validation is the caller's job (ExpenseDraft enforces it);
    this layer does not re-check.
    """

    def __init__(
        self,
        context: StorageContext,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._context = context
        self._activity = activity_logger or ActivityLogger()
        self._expenses: list[Expense] = []

    @property
    def expenses(self) -> list[Expense]:
        """Current collection (a copy; mutate through the repository)."""
        return list(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def find(self, expense_id: str) -> Optional[Expense]:
        return next((e for e in self._expenses if e.id == expense_id), None)

    async def load(self) -> list[Expense]:
        """Fetch the whole collection from the active backend."""
        storage = self._context.expense_storage()
        try:
            self._expenses = await storage.list_expenses()
        except StorageError as e:
            self._activity.log_storage_error("load_expenses", e, entity_type="expense")
            self._expenses = []

        mode, user_id = self._context.scope
        logger.info("expenses_loaded", count=len(self._expenses), mode=mode.value, user_id=user_id)
        return self.expenses

    async def add(self, draft: ExpenseDraft) -> Optional[Expense]:
        """
        Persist a new expense and put it at the head of the collection.

        Returns:
            The stored expense, or None if the backend rejected it
        """
        storage = self._context.expense_storage()
        try:
            expense = await storage.add_expense(draft)
        except StorageError as e:
            self._activity.log_storage_error("add_expense", e, entity_type="expense")
            return None

        self._expenses.insert(0, expense)
        self._activity.log(ActivityEventBuilder.expense_added(
            expense_id=expense.id,
            amount=str(expense.amount),
            category=expense.category,
            mode=self._context.scope[0].value,
        ))
        return expense

    async def update(self, expense_id: str, update: ExpenseUpdate) -> bool:
        """
        Merge fields into an existing expense.

        No-op (False) for an unknown id. Memory is updated only after the
        backend confirms.
        """
        index = next((i for i, e in enumerate(self._expenses) if e.id == expense_id), None)
        if index is None:
            return False

        storage = self._context.expense_storage()
        try:
            updated = await storage.update_expense(expense_id, update)
        except StorageError as e:
            self._activity.log_storage_error("update_expense", e, entity_type="expense")
            return False

        if not updated:
            logger.warning("expense_missing_in_backend", expense_id=expense_id)
            return False

        self._expenses[index] = self._expenses[index].apply(update)
        self._activity.log(ActivityEventBuilder.expense_updated(
            expense_id=expense_id,
            fields=sorted(update.changes()),
        ))
        return True

    async def delete(self, expense_id: str) -> bool:
        """Remove an expense once the backend confirms."""
        storage = self._context.expense_storage()
        try:
            deleted = await storage.delete_expense(expense_id)
        except StorageError as e:
            self._activity.log_storage_error("delete_expense", e, entity_type="expense")
            return False

        if not deleted:
            return False

        self._expenses = [e for e in self._expenses if e.id != expense_id]
        self._activity.log(ActivityEventBuilder.expense_deleted(expense_id))
        return True

    async def clear_all(self) -> bool:
        """Delete every expense of the current owner."""
        storage = self._context.expense_storage()
        try:
            cleared = await storage.clear_expenses()
        except StorageError as e:
            self._activity.log_storage_error("clear_expenses", e, entity_type="expense")
            return False

        if not cleared:
            return False

        count = len(self._expenses)
        self._expenses = []
        self._activity.log(ActivityEventBuilder.expenses_cleared(
            count=count,
            mode=self._context.scope[0].value,
        ))
        return True

    def export_snapshot(self, today: Optional[dt.date] = None) -> ExpenseExport:
        """Serialise the in-memory collection. Pure."""
        return export_expenses(self._expenses, today=today)

    def replace(self, expenses: list[Expense], persist_local: bool = False) -> None:
        """
        Swap the whole collection.

        Raises:
            StorageError: If persist_local is set and the local write fails
        """
        if persist_local:
            self._context.local_expenses.replace_all(expenses)
        self._expenses = list(expenses)

    def import_snapshot(self, document: Union[str, bytes]) -> list[Expense]:
        """
        Replace the collection with the contents of an export file.

        Destructive, not a merge. In local mode the local document is
        overwritten too; in remote mode the import only affects memory.

        Raises:
            ImportFormatError: If the document is malformed (nothing changes)
        """
        try:
            imported = parse_expenses_document(document)
        except ImportFormatError as e:
            self._activity.log(ActivityEventBuilder.import_rejected(str(e)))
            raise

        self.replace(imported, persist_local=not self._context.uses_remote)
        self._activity.log(ActivityEventBuilder.expenses_imported(len(imported)))
        return self.expenses

    def statistics(self) -> Statistics:
        return calculate_statistics(self._expenses)
