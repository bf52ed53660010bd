"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.entities import ChatSession, Message, TeacherSettings, UserProfile


class IUserProfileRepository(Protocol):
    """Protocol for user profile storage (users/{uid})."""

    async def get(self, uid: str) -> UserProfile | None:
        """Return the profile or None if not registered."""

    async def create(self, profile: UserProfile) -> None:
        """Write a new profile."""

    async def update(self, uid: str, fields: dict[str, Any]) -> None:
        """Patch stored fields of an existing profile."""

    async def list_teachers_for_class(self, class_name: str) -> list[UserProfile]:
        """Return teacher profiles whose classes taught include class_name."""


class IChatRepository(Protocol):
    """Protocol for chat sessions and messages of one user."""

    async def create_session(
        self, uid: str, *, title: str, subject: str, model: str | None = None
    ) -> ChatSession:
        """Create a session (awaited; the id is needed)."""

    async def get_session(self, uid: str, chat_id: str) -> ChatSession | None:
        """Return a session or None."""

    async def list_sessions(self, uid: str) -> list[ChatSession]:
        """Return sessions, newest first."""

    async def list_messages(self, uid: str, chat_id: str) -> list[Message]:
        """Return messages, oldest first."""

    def add_message(self, uid: str, chat_id: str, message: Message) -> None:
        """Queue a message write without waiting for it."""

    async def delete_session(self, uid: str, chat_id: str) -> None:
        """Delete a session and its messages."""

    async def delete_all_sessions(self, uid: str) -> int:
        """Delete every session of the user; return how many."""


class ITeacherSettingsRepository(Protocol):
    """Protocol for per-subject teacher settings."""

    async def get(self, teacher_id: str, subject: str) -> TeacherSettings | None:
        """Return saved settings or None."""

    async def save(self, settings: TeacherSettings) -> None:
        """Overwrite the settings for the teacher/subject pair."""
