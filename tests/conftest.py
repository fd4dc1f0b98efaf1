"""
Shared fixtures.

No real API calls in tests: the remote backend is either an in-memory
provider or the Google Sheets storage running against a fake worksheet.
"""

import asyncio
import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import pytest

from expense_tracker.auth import AuthGate
from expense_tracker.models.category import Category
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseUpdate,
)
from expense_tracker.models.results import StorageMode
from expense_tracker.repositories import CategoryRepository, ExpenseRepository
from expense_tracker.services.mode import StorageModeSelector
from expense_tracker.services.storage import (
    CategoryStorageInterface,
    LocalCategoryStorage,
    LocalExpenseStorage,
    LocalKeyValueStore,
    NotFoundError,
    RemoteExpenseStorageInterface,
    RemoteStorageProvider,
    StorageError,
)
from expense_tracker.services.storage.context import StorageContext
from expense_tracker.sync import SyncService


EXPENSES_KEY = "expense-tracker-data"
CATEGORIES_KEY = "expense-tracker-categories"
MODE_KEY = "expense-tracker-storage-mode"


def run(coro):
    """Run a coroutine to completion."""
    return asyncio.run(coro)


def make_draft(
    amount: str = "50",
    category: str = "Food",
    date: str = "2024-03-01",
    description: str = "Lunch",
) -> ExpenseDraft:
    return ExpenseDraft(
        amount=Decimal(amount),
        category=category,
        date=dt.date.fromisoformat(date),
        description=description,
    )


def make_expense(
    amount: str = "50",
    category: str = "Food",
    date: str = "2024-03-01",
    description: str = "Lunch",
    expense_id: Optional[str] = None,
) -> Expense:
    return Expense.from_draft(
        make_draft(amount, category, date, description),
        expense_id=expense_id,
    )


# =============================================================================
# IN-MEMORY REMOTE BACKEND
# =============================================================================

class InMemoryRemoteExpenses(RemoteExpenseStorageInterface):
    """Per-user view over a shared row list."""

    def __init__(self, backend: "InMemoryRemoteProvider", user_id: str):
        self._backend = backend
        self._user_id = user_id

    def _check(self, operation: str) -> None:
        self._backend.calls.append(operation)
        if operation in self._backend.failing:
            raise StorageError(f"{operation} failed")

    def _rows(self) -> list[Expense]:
        return self._backend.expenses.setdefault(self._user_id, [])

    async def list_expenses(self) -> list[Expense]:
        self._check("list_expenses")
        return sorted(self._rows(), key=lambda e: e.date, reverse=True)

    async def add_expense(self, draft: ExpenseDraft) -> Expense:
        self._check("add_expense")
        expense = Expense.from_draft(draft, expense_id=f"srv-{uuid4()}")
        self._rows().append(expense)
        return expense

    async def import_expense(self, expense: Expense) -> bool:
        self._check("import_expense")
        if expense.id in self._backend.failing_ids:
            raise StorageError(f"import of {expense.id} failed")
        if any(e.id == expense.id for e in self._rows()):
            return False
        self._rows().append(expense)
        return True

    async def update_expense(self, expense_id: str, update: ExpenseUpdate) -> bool:
        self._check("update_expense")
        rows = self._rows()
        for index, expense in enumerate(rows):
            if expense.id == expense_id:
                rows[index] = expense.apply(update)
                return True
        return False

    async def delete_expense(self, expense_id: str) -> bool:
        self._check("delete_expense")
        rows = self._rows()
        remaining = [e for e in rows if e.id != expense_id]
        self._backend.expenses[self._user_id] = remaining
        return len(remaining) != len(rows)

    async def clear_expenses(self) -> bool:
        self._check("clear_expenses")
        self._backend.expenses[self._user_id] = []
        return True


class InMemoryRemoteCategories(CategoryStorageInterface):

    def __init__(self, backend: "InMemoryRemoteProvider", user_id: str):
        self._backend = backend
        self._user_id = user_id

    def _check(self, operation: str) -> None:
        self._backend.calls.append(operation)
        if operation in self._backend.failing:
            raise StorageError(f"{operation} failed")

    def _rows(self) -> list[Category]:
        return self._backend.categories.setdefault(self._user_id, [])

    async def list_categories(self) -> list[Category]:
        self._check("list_categories")
        return list(self._rows())

    async def add_category(self, category: Category) -> Category:
        self._check("add_category")
        stored = category.model_copy(update={"id": f"cat-{uuid4()}"})
        self._rows().append(stored)
        return stored

    async def delete_category(self, category: Category) -> bool:
        self._check("delete_category")
        rows = self._rows()
        remaining = [c for c in rows if c.id != category.id]
        self._backend.categories[self._user_id] = remaining
        return len(remaining) != len(rows)

    async def update_order(self, categories: list[Category]) -> bool:
        self._check("update_order")
        by_id = {c.id: c for c in categories}
        self._backend.categories[self._user_id] = [
            by_id.get(c.id, c) for c in self._rows()
        ]
        return True

    async def set_default(self, category: Category) -> bool:
        self._check("set_default")
        rows = self._rows()
        if not any(c.id == category.id for c in rows):
            raise NotFoundError(category.name)
        self._backend.categories[self._user_id] = [
            c.model_copy(update={"is_default": c.id == category.id}) for c in rows
        ]
        return True

    async def clear_categories(self) -> bool:
        self._check("clear_categories")
        self._backend.categories[self._user_id] = []
        return True


class InMemoryRemoteProvider(RemoteStorageProvider):
    """Shared remote tables keyed by user id, with switchable failures."""

    def __init__(self, available: bool = True):
        self.available = available
        self.expenses: dict[str, list[Expense]] = {}
        self.categories: dict[str, list[Category]] = {}
        self.failing: set[str] = set()
        self.failing_ids: set[str] = set()
        self.calls: list[str] = []

    def is_available(self) -> bool:
        return self.available

    def expense_storage(self, user_id: str) -> InMemoryRemoteExpenses:
        return InMemoryRemoteExpenses(self, user_id)

    def category_storage(self, user_id: str) -> InMemoryRemoteCategories:
        return InMemoryRemoteCategories(self, user_id)


# =============================================================================
# FAKE GSPREAD WORKSHEET
# =============================================================================

def _a1_to_rowcol(label: str) -> tuple[int, int]:
    letters = "".join(ch for ch in label if ch.isalpha())
    digits = "".join(ch for ch in label if ch.isdigit())
    col = 0
    for ch in letters:
        col = col * 26 + (ord(ch.upper()) - ord("A") + 1)
    return int(digits), col


class FakeWorksheet:
    """The subset of gspread.Worksheet the storage classes use."""

    def __init__(self, header: list[str]):
        self.rows: list[list[str]] = [list(header)]
        self.batch_calls = 0

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(v) for v in values])

    def append_rows(self, values, value_input_option=None):
        for row in values:
            self.append_row(row)

    def delete_rows(self, start_index, end_index=None):
        end_index = end_index or start_index
        del self.rows[start_index - 1:end_index]

    def batch_update(self, data, **kwargs):
        self.batch_calls += 1
        for item in data:
            start = item["range"].split(":")[0]
            row_number, col = _a1_to_rowcol(start)
            for offset, row_values in enumerate(item["values"]):
                row = self.rows[row_number - 1 + offset]
                for col_offset, value in enumerate(row_values):
                    index = col - 1 + col_offset
                    while len(row) <= index:
                        row.append("")
                    row[index] = str(value)


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient."""

    def __init__(self):
        from expense_tracker.services.storage.google_sheets import (
            CATEGORY_COLUMNS,
            EXPENSE_COLUMNS,
        )
        self.expenses_sheet = FakeWorksheet(EXPENSE_COLUMNS)
        self.categories_sheet = FakeWorksheet(CATEGORY_COLUMNS)

    def get_expenses_sheet(self) -> FakeWorksheet:
        return self.expenses_sheet

    def get_categories_sheet(self) -> FakeWorksheet:
        return self.categories_sheet


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store(tmp_path) -> LocalKeyValueStore:
    return LocalKeyValueStore(tmp_path / "data")


@pytest.fixture
def remote() -> InMemoryRemoteProvider:
    return InMemoryRemoteProvider()


class Harness:
    """A wired set of components over a temp directory and in-memory remote."""

    def __init__(
        self,
        store: LocalKeyValueStore,
        remote: Optional[InMemoryRemoteProvider],
        mode: StorageMode,
        user_id: Optional[str],
    ):
        self.store = store
        self.remote = remote
        self.local_expenses = LocalExpenseStorage(store, EXPENSES_KEY)
        self.local_categories = LocalCategoryStorage(store, CATEGORIES_KEY)
        remote_available = remote is not None and remote.is_available()
        self.mode_selector = StorageModeSelector(store, remote_available, MODE_KEY)
        self.mode_selector.set_mode(mode)
        self.auth = AuthGate(user_id)
        self.context = StorageContext(
            mode_selector=self.mode_selector,
            auth=self.auth,
            local_expenses=self.local_expenses,
            local_categories=self.local_categories,
            remote=remote,
        )
        self.expenses = ExpenseRepository(self.context)
        self.categories = CategoryRepository(self.context)
        self.sync = SyncService(self.context, self.expenses)


@pytest.fixture
def local_harness(store, remote) -> Harness:
    """Local mode, nobody signed in."""
    return Harness(store, remote, StorageMode.LOCAL, None)


@pytest.fixture
def remote_harness(store, remote) -> Harness:
    """Remote mode, user-1 signed in."""
    return Harness(store, remote, StorageMode.REMOTE, "user-1")
