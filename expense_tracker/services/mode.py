"""
Storage Mode Selector

Chooses which backend is authoritative: the device ("local") or the
signed-in user's hosted tables ("remote"). The choice is persisted as a
preference on the device.

Remote availability is fixed at construction - it comes from configuration
and does not change during a session.
"""

from typing import Optional

import structlog

from expense_tracker.config import get_settings
from expense_tracker.models.results import StorageMode
from expense_tracker.services.storage.interface import StorageError
from expense_tracker.services.storage.local_store import LocalKeyValueStore


logger = structlog.get_logger(__name__)


class StorageModeSelector:
    """
    Process-wide mode state, held explicitly rather than as a global.

    Initial mode:
    - the saved preference, if it is "local", or "remote" while remote is available
    - otherwise "remote" if available, else "local"
    """

    def __init__(
        self,
        preferences: LocalKeyValueStore,
        remote_available: bool,
        key: Optional[str] = None,
    ):
        self._preferences = preferences
        self._remote_available = remote_available
        self._key = key or get_settings().local_storage.mode_key
        self._mode = self._initial_mode()

    def _initial_mode(self) -> StorageMode:
        saved = self._preferences.get_item(self._key)
        if saved == StorageMode.LOCAL.value:
            return StorageMode.LOCAL
        if saved == StorageMode.REMOTE.value and self._remote_available:
            return StorageMode.REMOTE
        return StorageMode.REMOTE if self._remote_available else StorageMode.LOCAL

    @property
    def mode(self) -> StorageMode:
        return self._mode

    @property
    def remote_available(self) -> bool:
        return self._remote_available

    def set_mode(self, mode: StorageMode) -> bool:
        """
        Switch the active backend and persist the preference.

        Asking for remote while it is unavailable is a no-op (logged).

        Returns:
            True if the mode is now `mode`
        """
        mode = StorageMode(mode)
        if mode == StorageMode.REMOTE and not self._remote_available:
            logger.warning("remote_storage_unavailable", requested=mode.value, mode=self._mode.value)
            return False

        self._mode = mode
        try:
            self._preferences.set_item(self._key, mode.value)
        except StorageError as e:
            # The switch still applies for this session
            logger.error("storage_mode_not_persisted", mode=mode.value, error=str(e))
        return True
