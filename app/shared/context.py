"""Request context management using contextvars.

Holds the authenticated actor for the current request or WebSocket. Tasks
created with asyncio.create_task copy the context, so background writes and
live subscriptions started during a request still see who started them.

Usage:
    set_current_user(user)
    user = get_current_user()
"""

from contextvars import ContextVar

from app.domain.entities.auth_user import AuthUser

_current_user: ContextVar[AuthUser | None] = ContextVar("current_user", default=None)


def set_current_user(user: AuthUser | None) -> None:
    """Set the actor for this request. Call after the ID token is verified."""
    _current_user.set(user)


def clear_current_user() -> None:
    """Clear the current user context."""
    _current_user.set(None)


def get_current_user() -> AuthUser | None:
    """Return the current actor, or None if the request is unauthenticated."""
    return _current_user.get()


def get_current_actor_id() -> str | None:
    """Return the current user's uid, or None if not authenticated."""
    user = _current_user.get()
    return user.uid if user else None
