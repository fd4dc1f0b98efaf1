"""
Sync Service

One-shot bulk copies between the device and the signed-in user's remote
tables. Sync never merges and never runs by itself: the user triggers it.

local_to_remote:
    Reads the LOCAL document (not the in-memory remote collection), uploads
    each record on its own, then reloads the remote collection. Records are
    keyed by their client-generated id, so running it again skips what is
    already there instead of duplicating rows.

remote_to_local:
    Fetches the full remote collection and overwrites the local document
    and the in-memory collection with it.

Preconditions are checked before ANY backend call. Partial upload failure
is reported as counts, not raised.
"""

from typing import Optional

import structlog

from expense_tracker.audit import ActivityLogger
from expense_tracker.models.activity import ActivityEventBuilder
from expense_tracker.models.results import StorageMode, SyncDirection, SyncResult
from expense_tracker.repositories.expenses import ExpenseRepository
from expense_tracker.services.storage.context import StorageContext
from expense_tracker.services.storage.interface import StorageError


logger = structlog.get_logger(__name__)


class SyncPreconditionError(Exception):
    """Sync cannot start: wrong mode, no user, no remote backend or nothing to copy."""
    pass


class SyncService:
    """Manual transfer of the expense collection between backends."""

    def __init__(
        self,
        context: StorageContext,
        expense_repository: ExpenseRepository,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._context = context
        self._expenses = expense_repository
        self._activity = activity_logger or ActivityLogger()

    def _reject(self, direction: SyncDirection, reason: str) -> SyncPreconditionError:
        self._activity.log(ActivityEventBuilder.sync_rejected(direction.value, reason))
        return SyncPreconditionError(reason)

    def _finish(self, result: SyncResult) -> SyncResult:
        self._activity.log(ActivityEventBuilder.sync_completed(
            direction=result.direction.value,
            attempted=result.attempted,
            synced=result.synced,
            skipped=result.skipped,
            failed=result.failed,
        ))
        return result

    async def local_to_remote(self) -> SyncResult:
        """
        Upload the device's expenses to the signed-in user's remote table.

        Raises:
            SyncPreconditionError: Mode is not remote, no user, remote
                unavailable, or the local document is empty
        """
        direction = SyncDirection.LOCAL_TO_REMOTE

        if self._context.mode != StorageMode.REMOTE:
            raise self._reject(direction, "Please switch to cloud mode first")
        if self._context.user_id is None:
            raise self._reject(direction, "Please sign in to sync to the cloud")

        remote = self._context.remote_expense_storage()
        if remote is None:
            raise self._reject(direction, "Cloud storage is not configured")

        local_expenses = self._context.local_expenses.snapshot()
        if not local_expenses:
            raise self._reject(direction, "No local data to sync")

        synced = skipped = failed = 0
        for expense in local_expenses:
            try:
                if await remote.import_expense(expense):
                    synced += 1
                else:
                    skipped += 1
            except StorageError as e:
                failed += 1
                logger.error("sync_upload_failed", expense_id=expense.id, error=str(e))

        await self._expenses.load()

        attempted = len(local_expenses)
        message = f"Successfully synced {synced} of {attempted} expenses to cloud"
        if skipped:
            message += f" ({skipped} already there)"
        if failed:
            message += f" ({failed} failed)"

        return self._finish(SyncResult(
            direction=direction,
            attempted=attempted,
            synced=synced,
            skipped=skipped,
            failed=failed,
            message=message,
        ))

    async def remote_to_local(self) -> SyncResult:
        """
        Replace the device's expenses with the signed-in user's remote ones.

        Raises:
            SyncPreconditionError: Mode is not local, no user, remote
                unavailable, or the remote collection is empty
            StorageError: If the remote read or the local write fails
        """
        direction = SyncDirection.REMOTE_TO_LOCAL

        if self._context.mode != StorageMode.LOCAL:
            raise self._reject(direction, "Please switch to local mode first")
        if self._context.user_id is None:
            raise self._reject(direction, "Please sign in to access cloud data")

        remote = self._context.remote_expense_storage()
        if remote is None:
            raise self._reject(direction, "Cloud storage is not configured")

        try:
            remote_expenses = await remote.list_expenses()
        except StorageError as e:
            self._activity.log_storage_error("sync_fetch_remote", e, entity_type="expense")
            raise

        if not remote_expenses:
            raise self._reject(direction, "No cloud data to sync")

        self._expenses.replace(remote_expenses, persist_local=True)

        count = len(remote_expenses)
        return self._finish(SyncResult(
            direction=direction,
            attempted=count,
            synced=count,
            message=f"Successfully synced {count} expenses from cloud to local",
        ))
