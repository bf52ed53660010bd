"""Firestore-backed teacher settings repository (teacherSettings/{uid}_{subject})."""

from __future__ import annotations

from app.domain.entities.teacher_settings import TeacherSettings, settings_document_id
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_TEACHER_SETTINGS


class FirestoreTeacherSettingsRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_TEACHER_SETTINGS)

    async def get(self, teacher_id: str, subject: str) -> TeacherSettings | None:
        """Return saved settings, or None if the teacher never saved any for subject."""
        snapshot = await self._coll.document(settings_document_id(teacher_id, subject)).get()
        if not snapshot.exists:
            return None
        data = snapshot.data
        return TeacherSettings(
            teacher_id=data.get("teacherId") or teacher_id,
            subject=data.get("subject") or subject,
            system_prompt=data.get("systemPrompt", ""),
            example_answers=list(data.get("exampleAnswers") or []),
        )

    async def save(self, settings: TeacherSettings) -> None:
        """Overwrite the settings document for the teacher/subject pair."""
        await self._coll.document(settings.document_id).set(
            {
                "teacherId": settings.teacher_id,
                "subject": settings.subject,
                "systemPrompt": settings.system_prompt,
                "exampleAnswers": list(settings.example_answers),
            }
        )
