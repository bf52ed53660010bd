"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    AuthUser,
    ChatSession,
    Message,
    ProviderIdentity,
    TeacherSettings,
    UserProfile,
)
from app.domain.enums import MessageRole, SecurityOperation, UserRole
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    AuthServiceUnavailableException,
    FirestoreNotConfiguredException,
    InferenceException,
    LyraException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    # Entities
    "AuthUser",
    "ProviderIdentity",
    "ChatSession",
    "Message",
    "TeacherSettings",
    "UserProfile",
    # Enums
    "MessageRole",
    "SecurityOperation",
    "UserRole",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "AuthServiceUnavailableException",
    "FirestoreNotConfiguredException",
    "InferenceException",
    "LyraException",
    "ResourceNotFoundException",
    "ValidationException",
]
