"""Current-user identity."""
from abc import ABC, abstractmethod
from contextvars import ContextVar
from typing import Optional

_current_user_id: ContextVar[Optional[str]] = ContextVar("current_user_id", default=None)


class IdentityProvider(ABC):
    """Supplies the id of the signed-in user."""

    @abstractmethod
    def current_user_id(self) -> Optional[str]:
        """Id of the current user, None when nobody is signed in."""
        pass


class StaticIdentityProvider(IdentityProvider):
    """Always the same user (or nobody)."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id


class RequestIdentityProvider(IdentityProvider):
    """Reads the user bound to the current request context."""

    def bind(self, user_id: Optional[str]) -> None:
        _current_user_id.set(user_id)

    def current_user_id(self) -> Optional[str]:
        return _current_user_id.get()
