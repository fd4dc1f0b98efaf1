"""
Storage Context

The one place that decides which backend is active. Repositories ask the
context for a storage object on every operation instead of branching on
mode and auth themselves.

Rule: remote only when the selected mode is remote AND a user is signed in
AND the remote backend is available. Anything else is local - a missing
user means local semantics regardless of the selected mode.
"""

from typing import Optional

from expense_tracker.auth import AuthGate
from expense_tracker.models.results import StorageMode
from expense_tracker.services.mode import StorageModeSelector
from expense_tracker.services.storage.interface import (
    CategoryStorageInterface,
    ExpenseStorageInterface,
    RemoteExpenseStorageInterface,
    RemoteStorageProvider,
)
from expense_tracker.services.storage.local_store import (
    LocalCategoryStorage,
    LocalExpenseStorage,
)


class StorageContext:
    """Explicit (mode, user) state handed to repositories at construction."""

    def __init__(
        self,
        mode_selector: StorageModeSelector,
        auth: AuthGate,
        local_expenses: LocalExpenseStorage,
        local_categories: LocalCategoryStorage,
        remote: Optional[RemoteStorageProvider] = None,
    ):
        self._mode_selector = mode_selector
        self._auth = auth
        self._local_expenses = local_expenses
        self._local_categories = local_categories
        self._remote = remote

    @property
    def mode(self) -> StorageMode:
        return self._mode_selector.mode

    @property
    def user_id(self) -> Optional[str]:
        return self._auth.user_id

    @property
    def remote_available(self) -> bool:
        return self._remote is not None and self._remote.is_available()

    @property
    def uses_remote(self) -> bool:
        return (
            self.mode == StorageMode.REMOTE
            and self._auth.is_authenticated
            and self.remote_available
        )

    @property
    def scope(self) -> tuple[StorageMode, Optional[str]]:
        """The data universe currently in view."""
        if self.uses_remote:
            return StorageMode.REMOTE, self.user_id
        return StorageMode.LOCAL, None

    @property
    def local_expenses(self) -> LocalExpenseStorage:
        return self._local_expenses

    @property
    def local_categories(self) -> LocalCategoryStorage:
        return self._local_categories

    def expense_storage(self) -> ExpenseStorageInterface:
        if self.uses_remote:
            return self._remote.expense_storage(self.user_id)
        return self._local_expenses

    def category_storage(self) -> CategoryStorageInterface:
        if self.uses_remote:
            return self._remote.category_storage(self.user_id)
        return self._local_categories

    def remote_expense_storage(self) -> Optional[RemoteExpenseStorageInterface]:
        """The signed-in user's remote expenses, whatever the mode."""
        if not self.remote_available or not self._auth.is_authenticated:
            return None
        return self._remote.expense_storage(self.user_id)
