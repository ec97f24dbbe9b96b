"""
Session cache: the signed-in user's public profile kept in local storage so a
restart restores the session without a network round trip.
The cached user is a point-in-time copy; it is not re-validated remotely.
"""
import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..core.local_storage import LocalStorage, ScopedStorage
from ..schemas.auth import AuthUser

logger = logging.getLogger(__name__)

AUTH_USER_KEY = "vanhoc10_auth_user"


class SessionCache:
    def __init__(self, storage: LocalStorage | ScopedStorage):
        self.storage = storage

    def load(self) -> Optional[AuthUser]:
        """Return the cached user, or None if absent or unreadable."""
        raw = self.storage.get_item(AUTH_USER_KEY)
        if not raw:
            return None
        try:
            return AuthUser.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning("[session] Discarding unreadable cached user: %s", e)
            return None

    def save(self, user: AuthUser) -> None:
        self.storage.set_item(AUTH_USER_KEY, user.model_dump_json(exclude_none=True))

    def clear(self) -> None:
        self.storage.remove_item(AUTH_USER_KEY)

    def update_profile(self, username: str, profile: dict[str, Any]) -> bool:
        """
        Replace the cached profile if the cached session belongs to `username`.
        Returns True if the cache was updated.
        """
        user = self.load()
        if user is None or user.username != username.lower():
            return False
        self.save(user.model_copy(update={"profile": profile}))
        return True
