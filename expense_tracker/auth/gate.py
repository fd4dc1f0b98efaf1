"""
Auth Gate

Carries the identity of the current user, if any. Authentication itself
happens outside this package; the gate only holds the opaque user id the
host hands it and tells the storage context whether anyone is signed in.
"""

from typing import Optional

import structlog


logger = structlog.get_logger(__name__)


class AuthGate:
    """Current user (or none)."""

    def __init__(self, user_id: Optional[str] = None):
        self._user_id: Optional[str] = None
        if user_id:
            self.sign_in(user_id)

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def sign_in(self, user_id: str) -> None:
        """
        Adopt a user identity.

        Raises:
            ValueError: If the id is blank
        """
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("User id cannot be empty")
        self._user_id = user_id
        logger.info("user_signed_in", user_id=user_id)

    def sign_out(self) -> None:
        if self._user_id is not None:
            logger.info("user_signed_out", user_id=self._user_id)
        self._user_id = None
