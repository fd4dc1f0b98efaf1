"""
Local (device) Storage Implementation

The device keeps one JSON document per key in a data directory - the
Python counterpart of browser localStorage. Three keys are used: the
expense document, the category document and the storage mode preference.

TRADEOFFS:
- Every write rewrites the whole document (fine for personal volumes)
- No locking; two processes on the same directory are last-write-wins
- Unreadable documents are treated as absent rather than fatal

Export and import of the expense collection also live here, since the
export file uses exactly the local document format.
"""

import datetime as dt
import json
from pathlib import Path
from typing import Any, Optional, Union
from uuid import uuid4

import structlog
from pydantic import TypeAdapter, ValidationError

from expense_tracker.config import get_settings
from expense_tracker.models.category import Category, default_categories
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseExport,
    ExpenseUpdate,
)
from expense_tracker.services.storage.interface import (
    CategoryStorageInterface,
    ExpenseStorageInterface,
    ImportFormatError,
    StorageError,
)


logger = structlog.get_logger(__name__)

_EXPENSE_LIST = TypeAdapter(list[Expense])
_CATEGORY_LIST = TypeAdapter(list[Category])


class LocalKeyValueStore:
    """
    Key/value store backed by JSON files in one directory.

    Values are any JSON-serialisable object.
    """

    def __init__(self, directory: Optional[Path] = None):
        if directory is None:
            directory = get_settings().local_storage.data_dir
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[Any]:
        """Read a value, or None if missing or unreadable."""
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("local_read_failed", key=key, error=str(e))
            return None

    def set_item(self, key: str, value: Any) -> None:
        """Write a value, replacing the previous one."""
        path = self._path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".tmp")
            tmp_path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(path)
        except (OSError, TypeError) as e:
            raise StorageError(f"Failed to write local key {key}: {e}")

    def remove_item(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove local key {key}: {e}")


class LocalExpenseStorage(ExpenseStorageInterface):
    """
    Device-local expense storage.

    The stored order is the display order: new records go to the head.
    """

    def __init__(self, store: LocalKeyValueStore, key: Optional[str] = None):
        self._store = store
        self._key = key or get_settings().local_storage.expenses_key

    def snapshot(self) -> list[Expense]:
        """The stored collection, skipping records that no longer parse."""
        raw = self._store.get_item(self._key)
        if not isinstance(raw, list):
            return []

        expenses = []
        for item in raw:
            try:
                expenses.append(Expense.model_validate(item))
            except ValidationError:
                logger.warning("local_expense_skipped", key=self._key)
                continue  # Skip malformed records
        return expenses

    def replace_all(self, expenses: list[Expense]) -> None:
        """Overwrite the stored collection."""
        self._store.set_item(self._key, [e.to_document() for e in expenses])

    async def list_expenses(self) -> list[Expense]:
        return self.snapshot()

    async def add_expense(self, draft: ExpenseDraft) -> Expense:
        expense = Expense.from_draft(draft)
        self.replace_all([expense, *self.snapshot()])
        return expense

    async def update_expense(self, expense_id: str, update: ExpenseUpdate) -> bool:
        expenses = self.snapshot()
        for index, expense in enumerate(expenses):
            if expense.id == expense_id:
                expenses[index] = expense.apply(update)
                self.replace_all(expenses)
                return True
        return False

    async def delete_expense(self, expense_id: str) -> bool:
        expenses = self.snapshot()
        remaining = [e for e in expenses if e.id != expense_id]
        if len(remaining) == len(expenses):
            return False
        self.replace_all(remaining)
        return True

    async def clear_expenses(self) -> bool:
        self.replace_all([])
        return True


class LocalCategoryStorage(CategoryStorageInterface):
    """
    Device-local category storage.

    An empty store reads as the compiled-in defaults. Those are only
    written to disk by the first mutation.
    """

    def __init__(self, store: LocalKeyValueStore, key: Optional[str] = None):
        self._store = store
        self._key = key or get_settings().local_storage.categories_key

    def snapshot(self) -> list[Category]:
        raw = self._store.get_item(self._key)
        if not isinstance(raw, list) or not raw:
            return default_categories()
        try:
            return _CATEGORY_LIST.validate_python(raw)
        except ValidationError as e:
            logger.error("local_categories_unreadable", key=self._key, error=str(e))
            return default_categories()

    def is_persisted(self) -> bool:
        return bool(self._store.get_item(self._key))

    def replace_all(self, categories: list[Category]) -> None:
        self._store.set_item(
            self._key,
            [c.model_dump(mode="json") for c in categories],
        )

    async def list_categories(self) -> list[Category]:
        return self.snapshot()

    async def add_category(self, category: Category) -> Category:
        stored = category.model_copy(update={"id": category.id or str(uuid4())})
        self.replace_all([*self.snapshot(), stored])
        return stored

    async def delete_category(self, category: Category) -> bool:
        categories = self.snapshot()
        target = category.id or category.name
        remaining = [c for c in categories if not c.matches(target)]
        if len(remaining) == len(categories):
            return False
        self.replace_all(remaining)
        return True

    async def update_order(self, categories: list[Category]) -> bool:
        self.replace_all(categories)
        return True

    async def set_default(self, category: Category) -> bool:
        target = category.id or category.name
        categories = self.snapshot()
        if not any(c.matches(target) for c in categories):
            return False
        self.replace_all([
            c.model_copy(update={"is_default": c.matches(target)})
            for c in categories
        ])
        return True

    async def clear_categories(self) -> bool:
        self._store.remove_item(self._key)
        return True


def export_expenses(
    expenses: list[Expense],
    today: Optional[dt.date] = None,
) -> ExpenseExport:
    """
    Serialise the collection to a downloadable JSON document.

    Pure: no backend interaction. The file name carries the export date.
    """
    today = today or dt.date.today()
    content = json.dumps(
        [e.to_document() for e in expenses],
        indent=2,
        ensure_ascii=False,
    )
    return ExpenseExport(
        filename=f"expenses-{today.isoformat()}.json",
        content=content,
        count=len(expenses),
    )


def parse_expenses_document(document: Union[str, bytes]) -> list[Expense]:
    """
    Parse an import document.

    The top level must be a JSON array and every element must be an
    expense-shaped record.

    Raises:
        ImportFormatError: On any format problem. Nothing is half-parsed.
    """
    try:
        data = json.loads(document)
    except ValueError as e:
        raise ImportFormatError(f"Import file is not valid JSON: {e}")

    if not isinstance(data, list):
        raise ImportFormatError("Invalid data format: expected a list of expenses")

    try:
        return _EXPENSE_LIST.validate_python(data)
    except ValidationError as e:
        raise ImportFormatError(
            f"Invalid data format: {e.error_count()} invalid field(s) in expense records"
        )
