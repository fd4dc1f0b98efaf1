"""
Activity Models

Every mutation of expenses or categories, every sync and every storage
failure produces an ActivityEvent. Events are written to the structured
log so a user-visible acknowledgment always has a matching log line.

DESIGN DECISION: Events are log-only. There is no activity table - the
backends hold user data, not history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we record."""
    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_CLEARED = "expenses_cleared"
    EXPENSES_IMPORTED = "expenses_imported"
    IMPORT_REJECTED = "import_rejected"

    # Categories
    CATEGORIES_SEEDED = "categories_seeded"
    CATEGORY_ADDED = "category_added"
    CATEGORY_REJECTED = "category_rejected"
    CATEGORY_DELETED = "category_deleted"
    CATEGORIES_REORDERED = "categories_reordered"
    DEFAULT_CATEGORY_SET = "default_category_set"
    CATEGORIES_RESET = "categories_reset"

    # Sync
    SYNC_COMPLETED = "sync_completed"
    SYNC_REJECTED = "sync_rejected"

    # Mode
    STORAGE_MODE_CHANGED = "storage_mode_changed"

    # Failures
    STORAGE_ERROR = "storage_error"


class ActivitySeverity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single recorded event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="'expense', 'category' or 'sync'"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten for the structured logger."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper to create common events with consistent descriptions.

    Repositories use these instead of building ActivityEvent by hand.
    """

    @staticmethod
    def expense_added(expense_id: str, amount: str, category: str, mode: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense of {amount} added to {category}",
            details={"amount": amount, "category": category, "mode": mode},
        )

    @staticmethod
    def expense_updated(expense_id: str, fields: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense updated",
            details={"fields": fields},
        )

    @staticmethod
    def expense_deleted(expense_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def expenses_cleared(count: int, mode: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSES_CLEARED,
            entity_type="expense",
            description=f"Cleared {count} expenses",
            details={"count": count, "mode": mode},
        )

    @staticmethod
    def expenses_imported(count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSES_IMPORTED,
            entity_type="expense",
            description=f"Imported {count} expenses (collection replaced)",
            details={"count": count},
        )

    @staticmethod
    def import_rejected(reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="expense",
            description="Import rejected: invalid file format",
            error_message=reason,
        )

    @staticmethod
    def categories_seeded(count: int, user_id: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORIES_SEEDED,
            entity_type="category",
            description=f"Seeded {count} default categories",
            details={"count": count, "user_id": user_id},
        )

    @staticmethod
    def category_added(category_id: Optional[str], name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=category_id,
            description=f"Category '{name}' added",
        )

    @staticmethod
    def category_rejected(name: str, reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORY_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="category",
            description=f"Category '{name}' rejected",
            error_message=reason,
        )

    @staticmethod
    def category_deleted(category_id: Optional[str], name: str, was_default: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORY_DELETED,
            # Deleting the default leaves the owner without one
            severity=ActivitySeverity.WARNING if was_default else ActivitySeverity.INFO,
            entity_type="category",
            entity_id=category_id,
            description=f"Category '{name}' deleted",
            details={"was_default": was_default},
        )

    @staticmethod
    def categories_reordered(names: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORIES_REORDERED,
            entity_type="category",
            description="Categories reordered",
            details={"order": names},
        )

    @staticmethod
    def default_category_set(category_id: Optional[str], name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DEFAULT_CATEGORY_SET,
            entity_type="category",
            entity_id=category_id,
            description=f"'{name}' is now the default category",
        )

    @staticmethod
    def categories_reset(count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORIES_RESET,
            entity_type="category",
            description=f"Categories reset to {count} defaults",
        )

    @staticmethod
    def sync_completed(direction: str, attempted: int, synced: int, skipped: int, failed: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SYNC_COMPLETED,
            severity=ActivitySeverity.WARNING if failed else ActivitySeverity.INFO,
            entity_type="sync",
            description=f"Synced {synced} of {attempted} expenses ({direction})",
            details={
                "direction": direction,
                "attempted": attempted,
                "synced": synced,
                "skipped": skipped,
                "failed": failed,
            },
        )

    @staticmethod
    def sync_rejected(direction: str, reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SYNC_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="sync",
            description=f"Sync {direction} not started",
            error_message=reason,
        )

    @staticmethod
    def storage_mode_changed(previous: str, current: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_MODE_CHANGED,
            description=f"Storage mode changed from {previous} to {current}",
            details={"previous": previous, "current": current},
        )

    @staticmethod
    def storage_error(operation: str, error_message: str, entity_type: Optional[str] = None) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_ERROR,
            severity=ActivitySeverity.ERROR,
            entity_type=entity_type,
            description=f"Storage operation failed: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
