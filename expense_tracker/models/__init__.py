"""
Data Models Package

All Pydantic models used by the expense tracker.
Everything read from or written to a backend passes through these schemas.
"""

from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseExport,
    ExpenseUpdate,
    generate_expense_id,
)
from expense_tracker.models.category import (
    DEFAULT_CATEGORIES,
    FALLBACK_COLOR,
    FALLBACK_ICON,
    Category,
    default_categories,
    sort_by_order,
)
from expense_tracker.models.results import (
    MonthComparison,
    Statistics,
    StorageMode,
    SyncDirection,
    SyncResult,
)
from expense_tracker.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseDraft",
    "ExpenseExport",
    "ExpenseUpdate",
    "generate_expense_id",
    # Category models
    "Category",
    "DEFAULT_CATEGORIES",
    "FALLBACK_COLOR",
    "FALLBACK_ICON",
    "default_categories",
    "sort_by_order",
    # Results
    "MonthComparison",
    "Statistics",
    "StorageMode",
    "SyncDirection",
    "SyncResult",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
