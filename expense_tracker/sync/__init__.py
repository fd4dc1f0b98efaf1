"""One-shot sync package."""

from expense_tracker.sync.service import SyncPreconditionError, SyncService

__all__ = ["SyncPreconditionError", "SyncService"]
