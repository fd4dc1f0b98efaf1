"""
Storage Services Package

Provides abstract interfaces and the two interchangeable backends:
device-local JSON documents and Google Sheets scoped per user.
"""

from expense_tracker.services.storage.interface import (
    CategoryStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    ImportFormatError,
    NotFoundError,
    RemoteExpenseStorageInterface,
    RemoteStorageProvider,
    StorageError,
)
from expense_tracker.services.storage.local_store import (
    LocalCategoryStorage,
    LocalExpenseStorage,
    LocalKeyValueStore,
    export_expenses,
    parse_expenses_document,
)
from expense_tracker.services.storage.google_sheets import (
    GoogleSheetsCategoryStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    GoogleSheetsStorageProvider,
)

__all__ = [
    # Interfaces
    "CategoryStorageInterface",
    "ExpenseStorageInterface",
    "RemoteExpenseStorageInterface",
    "RemoteStorageProvider",
    # Exceptions
    "ConnectionError",
    "ImportFormatError",
    "NotFoundError",
    "StorageError",
    # Local implementation
    "LocalCategoryStorage",
    "LocalExpenseStorage",
    "LocalKeyValueStore",
    "export_expenses",
    "parse_expenses_document",
    # Google Sheets implementation
    "GoogleSheetsCategoryStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "GoogleSheetsStorageProvider",
]
