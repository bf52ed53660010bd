"""Application services: chat, teacher settings, user profiles."""

from app.application.services.chat_service import ChatReply, ChatService
from app.application.services.profile_service import ProfileService
from app.application.services.teacher_settings_service import TeacherSettingsService

__all__ = [
    "ChatReply",
    "ChatService",
    "ProfileService",
    "TeacherSettingsService",
]
