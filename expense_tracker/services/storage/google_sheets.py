"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted remote backend because:
1. Users can view their data directly in Sheets
2. No database server to run
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

Each logical table is one worksheet with a header row. Every row carries
a `user_id` column and every operation is scoped by it.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions - multi-row writes use one batch update where possible
- Limited query capabilities (we filter and sort in Python)
"""

import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import get_settings, is_remote_configured
from expense_tracker.models.category import Category
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseUpdate,
    generate_expense_id,
    utc_now,
)
from expense_tracker.services.storage.interface import (
    CategoryStorageInterface,
    ConnectionError,
    NotFoundError,
    RemoteExpenseStorageInterface,
    RemoteStorageProvider,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column layout of the expenses table
EXPENSE_COLUMNS = [
    "id",
    "user_id",
    "amount",
    "category",
    "date",
    "description",
    "created_at",
]

# Column layout of the categories table
CATEGORY_COLUMNS = [
    "id",
    "user_id",
    "name",
    "icon",
    "color",
    "order_index",
    "is_default",
]

_IS_DEFAULT_COLUMN = CATEGORY_COLUMNS.index("is_default") + 1


def _safe_get(row: list, index: int, default: str = "") -> str:
    """Cell value, tolerating short rows."""
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the expenses worksheet."""
        return self._get_or_create_sheet(self._settings.expenses_sheet_name, EXPENSE_COLUMNS)

    def get_categories_sheet(self) -> gspread.Worksheet:
        """Get or create the categories worksheet."""
        return self._get_or_create_sheet(self._settings.categories_sheet_name, CATEGORY_COLUMNS)


class GoogleSheetsExpenseStorage(RemoteExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage for one user.

    Ids and created_at are assigned here, never by the caller.
    """

    def __init__(self, user_id: str, client: Optional[GoogleSheetsClient] = None):
        self._user_id = user_id
        self._client = client or GoogleSheetsClient()

    def _expense_to_row(self, expense: Expense) -> list:
        """Convert an Expense to a spreadsheet row."""
        return [
            expense.id,
            self._user_id,
            str(expense.amount),
            expense.category,
            expense.date.isoformat(),
            expense.description,
            expense.created_at.isoformat(),
        ]

    def _row_to_expense(self, row: list) -> Expense:
        """Convert a spreadsheet row to an Expense."""
        return Expense(
            id=_safe_get(row, 0),
            amount=Decimal(_safe_get(row, 2)),
            category=_safe_get(row, 3),
            date=dt.date.fromisoformat(_safe_get(row, 4)),
            description=_safe_get(row, 5),
            created_at=dt.datetime.fromisoformat(_safe_get(row, 6)),
        )

    def _owned_rows(self, all_rows: list[list]) -> list[tuple[int, list]]:
        """(sheet row number, row) for this user's rows, header excluded."""
        return [
            (idx, row)
            for idx, row in enumerate(all_rows[1:], start=2)  # Row 1 is the header
            if row and row[0] and _safe_get(row, 1) == self._user_id
        ]

    async def list_expenses(self) -> list[Expense]:
        """Select all of the user's expenses, newest date first."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")

        expenses = []
        for _, row in self._owned_rows(all_rows):
            try:
                expenses.append(self._row_to_expense(row))
            except Exception:
                continue  # Skip malformed rows

        expenses.sort(key=lambda e: e.date, reverse=True)
        return expenses

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def add_expense(self, draft: ExpenseDraft) -> Expense:
        """Insert a new expense; the backend assigns id and created_at."""
        expense = Expense.from_draft(
            draft,
            expense_id=generate_expense_id(),
            created_at=utc_now(),
        )
        try:
            sheet = self._client.get_expenses_sheet()
            sheet.append_row(self._expense_to_row(expense), value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")
        return expense

    async def import_expense(self, expense: Expense) -> bool:
        """Insert a record under its client id unless that id already exists."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()
            if any(row[0] == expense.id for _, row in self._owned_rows(all_rows)):
                return False
            sheet.append_row(self._expense_to_row(expense), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to import expense {expense.id}: {e}")

    async def update_expense(self, expense_id: str, update: ExpenseUpdate) -> bool:
        """Rewrite the matching row in a single batch update."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in self._owned_rows(all_rows):
                if row[0] == expense_id:
                    updated = self._row_to_expense(row).apply(update)
                    first = rowcol_to_a1(idx, 1)
                    last = rowcol_to_a1(idx, len(EXPENSE_COLUMNS))
                    sheet.batch_update([{
                        "range": f"{first}:{last}",
                        "values": [self._expense_to_row(updated)],
                    }])
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to update expense: {e}")

    async def delete_expense(self, expense_id: str) -> bool:
        """Delete an expense by id."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in self._owned_rows(all_rows):
                if row[0] == expense_id:
                    sheet.delete_rows(idx)
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")

    async def clear_expenses(self) -> bool:
        """Delete every row of this user (bottom-up so row numbers stay valid)."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()
            for idx, _ in reversed(self._owned_rows(all_rows)):
                sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to clear expenses: {e}")


class GoogleSheetsCategoryStorage(CategoryStorageInterface):
    """
    Google Sheets implementation of category storage for one user.

    The default flag is written for all of the user's rows in one batch,
    so there is no window in which two defaults (or none) are stored.
    """

    def __init__(self, user_id: str, client: Optional[GoogleSheetsClient] = None):
        self._user_id = user_id
        self._client = client or GoogleSheetsClient()

    def _category_to_row(self, category: Category) -> list:
        """Convert a Category to a spreadsheet row."""
        return [
            category.id or "",
            self._user_id,
            category.name,
            category.icon,
            category.color,
            "" if category.order_index is None else str(category.order_index),
            str(category.is_default),
        ]

    def _row_to_category(self, row: list) -> Category:
        """Convert a spreadsheet row to a Category."""
        order_index = _safe_get(row, 5)
        return Category(
            id=_safe_get(row, 0),
            name=_safe_get(row, 2),
            icon=_safe_get(row, 3),
            color=_safe_get(row, 4),
            order_index=int(order_index) if order_index else None,
            is_default=_safe_get(row, 6).lower() == "true",
        )

    def _owned_rows(self, all_rows: list[list]) -> list[tuple[int, list]]:
        return [
            (idx, row)
            for idx, row in enumerate(all_rows[1:], start=2)
            if row and row[0] and _safe_get(row, 1) == self._user_id
        ]

    async def list_categories(self) -> list[Category]:
        try:
            sheet = self._client.get_categories_sheet()
            all_rows = sheet.get_all_values()
        except Exception as e:
            raise StorageError(f"Failed to list categories: {e}")

        categories = []
        for _, row in self._owned_rows(all_rows):
            try:
                categories.append(self._row_to_category(row))
            except Exception:
                continue  # Skip malformed rows
        return categories

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def add_category(self, category: Category) -> Category:
        """Insert a category; the backend assigns its id."""
        stored = category.model_copy(update={"id": str(uuid4())})
        try:
            sheet = self._client.get_categories_sheet()
            sheet.append_row(self._category_to_row(stored), value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save category: {e}")
        return stored

    async def delete_category(self, category: Category) -> bool:
        if not category.id:
            return False
        try:
            sheet = self._client.get_categories_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in self._owned_rows(all_rows):
                if row[0] == category.id:
                    sheet.delete_rows(idx)
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to delete category: {e}")

    async def update_order(self, categories: list[Category]) -> bool:
        """Bulk upsert: rewrite known ids in one batch, append the rest."""
        try:
            sheet = self._client.get_categories_sheet()
            all_rows = sheet.get_all_values()
            row_numbers = {row[0]: idx for idx, row in self._owned_rows(all_rows)}

            updates = []
            new_rows = []
            for category in categories:
                row = self._category_to_row(category)
                idx = row_numbers.get(category.id) if category.id else None
                if idx is None:
                    if not category.id:
                        row[0] = str(uuid4())
                    new_rows.append(row)
                else:
                    updates.append({
                        "range": f"{rowcol_to_a1(idx, 1)}:{rowcol_to_a1(idx, len(CATEGORY_COLUMNS))}",
                        "values": [row],
                    })

            if updates:
                sheet.batch_update(updates)
            if new_rows:
                sheet.append_rows(new_rows, value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to update category order: {e}")

    async def set_default(self, category: Category) -> bool:
        """Clear every default of the user and set the target, in one write."""
        try:
            sheet = self._client.get_categories_sheet()
            all_rows = sheet.get_all_values()
            owned = self._owned_rows(all_rows)
        except Exception as e:
            raise StorageError(f"Failed to set default category: {e}")

        if not any(row[0] == category.id for _, row in owned):
            raise NotFoundError(f"Category not found: {category.id or category.name}")

        try:
            sheet.batch_update([
                {
                    "range": rowcol_to_a1(idx, _IS_DEFAULT_COLUMN),
                    "values": [[str(row[0] == category.id)]],
                }
                for idx, row in owned
            ])
            return True
        except Exception as e:
            raise StorageError(f"Failed to set default category: {e}")

    async def clear_categories(self) -> bool:
        try:
            sheet = self._client.get_categories_sheet()
            all_rows = sheet.get_all_values()
            for idx, _ in reversed(self._owned_rows(all_rows)):
                sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to clear categories: {e}")


class GoogleSheetsStorageProvider(RemoteStorageProvider):
    """Hands out per-user storage sharing one client connection."""

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        available: Optional[bool] = None,
    ):
        self._available = is_remote_configured() if available is None else available
        self._client = client
        if self._client is None and self._available:
            self._client = GoogleSheetsClient()

    def is_available(self) -> bool:
        return self._available

    def expense_storage(self, user_id: str) -> GoogleSheetsExpenseStorage:
        return GoogleSheetsExpenseStorage(user_id, self._client)

    def category_storage(self, user_id: str) -> GoogleSheetsCategoryStorage:
        return GoogleSheetsCategoryStorage(user_id, self._client)
