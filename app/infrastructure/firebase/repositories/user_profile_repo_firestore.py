"""Firestore-backed user profile repository (users/{uid})."""

from __future__ import annotations

from typing import Any

from app.domain.entities.user import UserProfile
from app.domain.enums import UserRole
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP
from app.infrastructure.firebase.collections import COLLECTION_USERS, user_path
from app.infrastructure.firebase.descriptors import DocumentDescriptor
from app.shared.utils.datetime import ensure_utc


def profile_document(uid: str) -> DocumentDescriptor:
    """The signed-in user's own profile document, users/{uid}."""
    return DocumentDescriptor(user_path(uid))


def profile_from_document(uid: str, data: dict[str, Any]) -> UserProfile:
    return UserProfile(
        uid=data.get("uid") or uid,
        name=data.get("name", ""),
        email=data.get("email", ""),
        role=UserRole(data.get("role", UserRole.STUDENT.value)),
        school=data.get("school", ""),
        created_at=ensure_utc(data.get("createdAt")),
        class_name=data.get("class"),
        classes_taught=list(data.get("classesTaught") or []),
        subjects_taught=list(data.get("subjectsTaught") or []),
    )


def profile_to_document(profile: UserProfile) -> dict[str, Any]:
    """Stored shape; students keep 'class', teachers keep classes/subjects taught."""
    data: dict[str, Any] = {
        "uid": profile.uid,
        "name": profile.name,
        "email": profile.email,
        "role": profile.role.value,
        "school": profile.school,
        "createdAt": profile.created_at or SERVER_TIMESTAMP,
    }
    if profile.is_teacher:
        data["classesTaught"] = list(profile.classes_taught)
        data["subjectsTaught"] = list(profile.subjects_taught)
    elif profile.class_name is not None:
        data["class"] = profile.class_name
    return data


class FirestoreUserProfileRepository:
    """Reads and writes user profiles with the caller's client (rules apply)."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_USERS)

    async def get(self, uid: str) -> UserProfile | None:
        """Return the profile, or None if the user has not registered one."""
        snapshot = await self._coll.document(uid).get()
        if not snapshot.exists:
            return None
        return profile_from_document(snapshot.id, snapshot.data)

    async def create(self, profile: UserProfile) -> None:
        """Write a new profile; createdAt is set by the server when not given."""
        await self._coll.document(profile.uid).set(profile_to_document(profile))

    async def update(self, uid: str, fields: dict[str, Any]) -> None:
        """Patch stored fields (camelCase names). Fails if the profile is missing."""
        await self._coll.document(uid).update(fields)

    async def list_teachers_for_class(self, class_name: str) -> list[UserProfile]:
        """Return teachers whose classesTaught contains class_name."""
        query = self._coll.where("role", "==", UserRole.TEACHER.value).where(
            "classesTaught", "array-contains", class_name
        )
        return [profile_from_document(doc.id, doc.data) async for doc in query.stream()]
