"""
Session Management

One process, one session. The session pointer is the profile of the
logged-in user, persisted under "active_session" so a restart picks
up where the user left off.
"""

from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from finance_tracker.models.account import UserProfile
from finance_tracker.models.finance import UserDataBlob
from finance_tracker.services.storage import (
    ACTIVE_SESSION_KEY,
    KeyValueStore,
    MalformedPayloadError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class SessionContext(BaseModel):
    """
    Everything user-scoped held in memory for the current session.

    Replaced as a whole on login and logout; the controller owns it.
    """

    profile: UserProfile = Field(default_factory=UserProfile)
    data: UserDataBlob = Field(default_factory=UserDataBlob)
    is_authenticated: bool = False

    @classmethod
    def anonymous(cls, currency: str = "R$") -> "SessionContext":
        return cls(profile=UserProfile.anonymous(currency))

    @classmethod
    def for_profile(
        cls,
        profile: UserProfile,
        data: Optional[UserDataBlob] = None,
    ) -> "SessionContext":
        return cls(
            profile=profile,
            data=data or UserDataBlob(),
            is_authenticated=True,
        )


class SessionManager:
    """Loads, saves and clears the persisted session pointer."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def restore(self) -> Optional[UserProfile]:
        """
        Read the session pointer on startup.

        A pointer that cannot be read is discarded: the user simply has
        to log in again.
        """
        try:
            raw = self._store.get(ACTIVE_SESSION_KEY)
        except MalformedPayloadError as e:
            logger.warning("session_pointer_discarded", error=str(e))
            self._store.delete(ACTIVE_SESSION_KEY)
            return None
        except StorageError as e:
            logger.warning("session_pointer_unreadable", error=str(e))
            return None

        if raw is None:
            return None

        try:
            profile = UserProfile.model_validate(raw)
        except ValidationError as e:
            logger.warning("session_pointer_discarded", error=f"{e.error_count()} validation errors")
            self._store.delete(ACTIVE_SESSION_KEY)
            return None

        if profile.is_anonymous:
            return None
        return profile

    def start(self, profile: UserProfile) -> None:
        self._store.set(ACTIVE_SESSION_KEY, profile.model_dump(mode="json"))

    def end(self) -> None:
        self._store.delete(ACTIVE_SESSION_KEY)
