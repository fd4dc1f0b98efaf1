"""
Main Orchestrator for Expense Tracker

Ties the components together for a host UI:
settings -> local store -> remote provider -> mode selector -> auth gate
-> storage context -> repositories -> sync service.

DESIGN DECISION: Everything the repositories depend on is built here and
passed in explicitly. There is no module-level mode or user state.
"""

from pathlib import Path
from typing import Optional

import structlog

from expense_tracker.audit import ActivityLogger, configure_logging
from expense_tracker.auth import AuthGate
from expense_tracker.config import get_settings
from expense_tracker.models.activity import ActivityEventBuilder
from expense_tracker.models.results import StorageMode
from expense_tracker.repositories import CategoryRepository, ExpenseRepository
from expense_tracker.services.mode import StorageModeSelector
from expense_tracker.services.storage import (
    GoogleSheetsStorageProvider,
    LocalCategoryStorage,
    LocalExpenseStorage,
    LocalKeyValueStore,
    RemoteStorageProvider,
)
from expense_tracker.services.storage.context import StorageContext
from expense_tracker.sync import SyncService


logger = structlog.get_logger(__name__)


class TrackerComponents:
    """Everything a host UI needs, wired together."""

    def __init__(
        self,
        context: StorageContext,
        mode_selector: StorageModeSelector,
        auth: AuthGate,
        expenses: ExpenseRepository,
        categories: CategoryRepository,
        sync: SyncService,
        activity_logger: ActivityLogger,
    ):
        self.context = context
        self.mode_selector = mode_selector
        self.auth = auth
        self.expenses = expenses
        self.categories = categories
        self.sync = sync
        self.activity_logger = activity_logger

    async def load(self) -> None:
        """(Re)load both collections for the current scope."""
        await self.expenses.load()
        await self.categories.load()

    async def switch_mode(self, mode: StorageMode) -> bool:
        """Change the storage mode and reload from the newly active backend."""
        previous = self.mode_selector.mode
        if not self.mode_selector.set_mode(mode):
            return False
        if previous != self.mode_selector.mode:
            self.activity_logger.log(ActivityEventBuilder.storage_mode_changed(
                previous=previous.value,
                current=self.mode_selector.mode.value,
            ))
            await self.load()
        return True

    async def sign_in(self, user_id: str) -> None:
        self.auth.sign_in(user_id)
        await self.load()

    async def sign_out(self) -> None:
        self.auth.sign_out()
        await self.load()


def create_app_components(
    user_id: Optional[str] = None,
    data_dir: Optional[Path] = None,
    use_remote: bool = True,
    remote: Optional[RemoteStorageProvider] = None,
) -> TrackerComponents:
    """
    Factory function to create all application components.

    Args:
        user_id: Signed-in user, if already known (defaults to APP settings)
        data_dir: Directory for local documents (defaults to settings)
        use_remote: Whether to set up the Google Sheets backend.
                    Set to False for local-only use and testing.
        remote: Pre-built remote provider (overrides use_remote)

    Returns:
        Wired TrackerComponents; call `await components.load()` next.
    """
    settings = get_settings()
    app_settings = settings.app
    local_settings = settings.local_storage
    configure_logging(app_settings.effective_log_level)

    store = LocalKeyValueStore(data_dir or local_settings.data_dir)
    local_expenses = LocalExpenseStorage(store, local_settings.expenses_key)
    local_categories = LocalCategoryStorage(store, local_settings.categories_key)

    if remote is None and use_remote:
        try:
            remote = GoogleSheetsStorageProvider()
        except Exception as e:
            # Remote not configured - continue local-only
            logger.warning("remote_storage_not_configured", error=str(e))
            remote = None

    remote_available = remote is not None and remote.is_available()
    mode_selector = StorageModeSelector(store, remote_available, local_settings.mode_key)
    auth = AuthGate(user_id or app_settings.user_id)

    context = StorageContext(
        mode_selector=mode_selector,
        auth=auth,
        local_expenses=local_expenses,
        local_categories=local_categories,
        remote=remote,
    )

    activity_logger = ActivityLogger()
    expenses = ExpenseRepository(context, activity_logger)
    categories = CategoryRepository(context, activity_logger)
    sync = SyncService(context, expenses, activity_logger)

    logger.info(
        "components_created",
        mode=mode_selector.mode.value,
        remote_available=remote_available,
        user_id=auth.user_id,
    )

    return TrackerComponents(
        context=context,
        mode_selector=mode_selector,
        auth=auth,
        expenses=expenses,
        categories=categories,
        sync=sync,
        activity_logger=activity_logger,
    )
