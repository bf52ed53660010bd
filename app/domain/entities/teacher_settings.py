"""Teacher settings domain entity.

Per-subject customization of the tutor's system prompt and few-shot
example answers. Stored in teacherSettings/{teacher_id}_{subject-slug}.
"""

import re
from dataclasses import dataclass, field

from app.core.constants import DEFAULT_EXAMPLE_ANSWERS, DEFAULT_SYSTEM_PROMPT
from app.domain.exceptions import ValidationException

_WHITESPACE = re.compile(r"\s+")

MIN_SYSTEM_PROMPT_LENGTH = 10


@dataclass
class TeacherSettings:
    """Domain entity for a teacher's per-subject tutor configuration.

    Validation runs on construction: the system prompt must be at least
    MIN_SYSTEM_PROMPT_LENGTH characters and example answers must be non-empty.
    """

    teacher_id: str
    subject: str
    system_prompt: str
    example_answers: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate settings rules. Raises ValidationException if invalid."""
        if not self.teacher_id:
            raise ValidationException("Teacher id is required", field="teacher_id")
        if not self.subject or not self.subject.strip():
            raise ValidationException("Subject is required", field="subject")
        if len(self.system_prompt.strip()) < MIN_SYSTEM_PROMPT_LENGTH:
            raise ValidationException(
                f"System prompt must be at least {MIN_SYSTEM_PROMPT_LENGTH} characters.",
                field="system_prompt",
            )
        if any(not example.strip() for example in self.example_answers):
            raise ValidationException("Example cannot be empty.", field="example_answers")

    @property
    def document_id(self) -> str:
        return settings_document_id(self.teacher_id, self.subject)

    @classmethod
    def defaults(cls, teacher_id: str, subject: str) -> "TeacherSettings":
        """Return the settings used before a teacher saves any customization."""
        return cls(
            teacher_id=teacher_id,
            subject=subject,
            system_prompt=DEFAULT_SYSTEM_PROMPT,
            example_answers=list(DEFAULT_EXAMPLE_ANSWERS),
        )


def settings_document_id(teacher_id: str, subject: str) -> str:
    """Document id for a teacher/subject pair; whitespace runs become '-'."""
    return f"{teacher_id}_{_WHITESPACE.sub('-', subject)}"
