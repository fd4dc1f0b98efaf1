"""Services package."""

from expense_tracker.services.storage import (
    CategoryStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    GoogleSheetsCategoryStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    GoogleSheetsStorageProvider,
    ImportFormatError,
    LocalCategoryStorage,
    LocalExpenseStorage,
    LocalKeyValueStore,
    NotFoundError,
    RemoteExpenseStorageInterface,
    RemoteStorageProvider,
    StorageError,
)
from expense_tracker.services.mode import StorageModeSelector

__all__ = [
    # Storage services
    "CategoryStorageInterface",
    "ConnectionError",
    "ExpenseStorageInterface",
    "GoogleSheetsCategoryStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "GoogleSheetsStorageProvider",
    "ImportFormatError",
    "LocalCategoryStorage",
    "LocalExpenseStorage",
    "LocalKeyValueStore",
    "NotFoundError",
    "RemoteExpenseStorageInterface",
    "RemoteStorageProvider",
    "StorageError",
    # Mode
    "StorageModeSelector",
]
