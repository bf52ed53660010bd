"""Domain enumerations for the Lyra application.

Enums represent fixed sets of domain values (roles, message authors, and
the operation kinds reported in permission errors).
"""

from enum import Enum


class UserRole(str, Enum):
    """Role stored on the user profile; decides student vs teacher features."""

    STUDENT = "student"
    TEACHER = "teacher"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings."""
        return [role.value for role in cls]


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class SecurityOperation(str, Enum):
    """Operation kind as seen by Firestore Security Rules.

    GET is a single-document fetch, LIST a collection/query fetch. WRITE is
    used for set(), which may be either a create or an update.
    """

    GET = "get"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    WRITE = "write"

    @property
    def is_write(self) -> bool:
        """Return True for operations that carry a request payload."""
        return self not in (SecurityOperation.GET, SecurityOperation.LIST)
