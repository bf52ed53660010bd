"""Firestore-backed repositories for profiles, chats and teacher settings."""

from app.infrastructure.firebase.repositories.chat_repo_firestore import (
    FirestoreChatRepository,
)
from app.infrastructure.firebase.repositories.teacher_settings_repo_firestore import (
    FirestoreTeacherSettingsRepository,
)
from app.infrastructure.firebase.repositories.user_profile_repo_firestore import (
    FirestoreUserProfileRepository,
)

__all__ = [
    "FirestoreChatRepository",
    "FirestoreTeacherSettingsRepository",
    "FirestoreUserProfileRepository",
]
