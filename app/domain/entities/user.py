"""User profile domain entity.

Represents a student or teacher profile stored under users/{uid},
independent of persistence.
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.enums import UserRole
from app.domain.exceptions import ValidationException


@dataclass
class UserProfile:
    """Domain entity for a user profile.

    Students carry the class they are in; teachers carry the classes and
    subjects they teach. Validation runs on construction.
    """

    uid: str
    name: str
    email: str
    role: UserRole
    school: str
    created_at: datetime | None = None
    class_name: str | None = None
    classes_taught: list[str] = field(default_factory=list)
    subjects_taught: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate profile rules. Raises ValidationException if invalid."""
        if not self.uid:
            raise ValidationException("User uid is required", field="uid")
        if not self.email:
            raise ValidationException("User email is required", field="email")

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER

    def teaches(self, subject: str) -> bool:
        """Return whether this profile is a teacher assigned to the subject."""
        return self.is_teacher and subject in self.subjects_taught
