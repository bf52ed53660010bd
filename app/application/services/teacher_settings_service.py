"""Teacher settings application service: per-subject tutor customization."""

from __future__ import annotations

import logging

from app.application.flows import (
    GuidedResponseInput,
    GuidedResponseOutput,
    TeachingStyleInput,
    TeachingStyleOutput,
    customize_ai_teaching_style,
    generate_guided_response,
)
from app.application.interfaces import (
    IPromptExecutor,
    ITeacherSettingsRepository,
    IUserProfileRepository,
)
from app.domain.entities import TeacherSettings
from app.domain.exceptions import AuthorizationException

logger = logging.getLogger(__name__)


class TeacherSettingsService:
    """Load, save, try out and refine a teacher's tutor settings."""

    def __init__(
        self,
        settings_repo: ITeacherSettingsRepository,
        profile_repo: IUserProfileRepository,
        executor: IPromptExecutor,
    ) -> None:
        self._settings = settings_repo
        self._profiles = profile_repo
        self._executor = executor

    async def _require_teacher_of(self, teacher_id: str, subject: str, action: str) -> None:
        profile = await self._profiles.get(teacher_id)
        if profile is None or not profile.teaches(subject):
            raise AuthorizationException(resource="teacherSettings", action=action)

    async def get_settings(self, teacher_id: str, subject: str) -> TeacherSettings:
        """Saved settings for subject, or the defaults when none were saved."""
        await self._require_teacher_of(teacher_id, subject, "read")
        settings = await self._settings.get(teacher_id, subject)
        return settings or TeacherSettings.defaults(teacher_id, subject)

    async def save_settings(
        self,
        teacher_id: str,
        subject: str,
        system_prompt: str,
        example_answers: list[str],
    ) -> TeacherSettings:
        """Validate and store settings; the write is awaited so the teacher gets confirmation.

        Raises:
            AuthorizationException: Caller is not a teacher of subject.
            ValidationException: Prompt too short or an empty example.
        """
        await self._require_teacher_of(teacher_id, subject, "update")
        settings = TeacherSettings(
            teacher_id=teacher_id,
            subject=subject,
            system_prompt=system_prompt,
            example_answers=list(example_answers),
        )
        await self._settings.save(settings)
        logger.info("Saved tutor settings %s", settings.document_id)
        return settings

    async def test_settings(
        self,
        system_prompt: str,
        example_answers: list[str],
        student_question: str,
        model_id: str | None = None,
    ) -> GuidedResponseOutput:
        """Answer a sample question with unsaved settings (the "Test AI" sandbox)."""
        return await generate_guided_response(
            self._executor,
            GuidedResponseInput(
                student_question=student_question,
                teacher_examples=list(example_answers),
                system_prompt=system_prompt,
            ),
            model_id,
        )

    async def refine_prompt(
        self,
        system_prompt: str,
        example_answers: list[str] | None = None,
        model_id: str | None = None,
    ) -> TeachingStyleOutput:
        """Ask the model to rewrite the system prompt around the examples."""
        examples = "\n".join(f"- {e}" for e in example_answers or []) or None
        return await customize_ai_teaching_style(
            self._executor,
            TeachingStyleInput(system_prompt=system_prompt, example_good_answers=examples),
            model_id,
        )
