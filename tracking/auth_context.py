"""Injectable holder of the signed-in user.

Components that care about who is reading receive an ``AuthContext``
explicitly and may subscribe to identity changes. The context is created
when a reader session starts and torn down with it; ``close()`` drops every
subscriber so nothing outlives the session.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    user_id: str
    email: str
    username: str = ""


Listener = Callable[[Optional[UserIdentity]], None]


class AuthContext:
    """Current user plus change notification."""

    def __init__(self, user: Optional[UserIdentity] = None):
        self._user = user
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def current_user(self) -> Optional[UserIdentity]:
        return self._user

    @property
    def user_id(self) -> Optional[str]:
        return self._user.user_id if self._user else None

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unsubscribes it."""
        if self._closed:
            raise RuntimeError("AuthContext is closed")
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_user(self, user: Optional[UserIdentity]) -> None:
        """Replace the identity; listeners run only on an actual change."""
        if self._closed or user == self._user:
            return
        self._user = user
        logger.debug("Auth state changed: %s", user.user_id if user else "signed out")
        for listener in list(self._listeners):
            listener(user)

    def clear(self) -> None:
        self.set_user(None)

    def close(self) -> None:
        self._listeners.clear()
        self._closed = True
