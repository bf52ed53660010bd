"""Chat session and message domain entities."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import MessageRole
from app.domain.exceptions import ValidationException


@dataclass
class ChatSession:
    """A student's conversation with the tutor about one subject.

    Stored under users/{user_id}/chatSessions/{id}.
    """

    id: str
    user_id: str
    title: str
    subject: str
    model: str | None = None
    start_time: datetime | None = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValidationException("Chat session must belong to a user", field="user_id")
        if not self.subject:
            raise ValidationException("Chat session subject is required", field="subject")


@dataclass
class Message:
    """One chat turn. id is None until the store assigns it."""

    role: MessageRole
    content: str
    id: str | None = None
    created_at: datetime | None = None

    def to_document(self) -> dict:
        """Return the Firestore document body (id is the document key, not a field)."""
        data: dict = {"role": self.role.value, "content": self.content}
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        return data
