"""Domain entities: actors, user profiles, chat sessions/messages, teacher settings."""

from app.domain.entities.auth_user import AuthUser, ProviderIdentity
from app.domain.entities.chat import ChatSession, Message
from app.domain.entities.teacher_settings import TeacherSettings, settings_document_id
from app.domain.entities.user import UserProfile

__all__ = [
    "AuthUser",
    "ChatSession",
    "Message",
    "ProviderIdentity",
    "TeacherSettings",
    "UserProfile",
    "settings_document_id",
]
