"""User profile application service: register and edit the signed-in user's profile."""

from __future__ import annotations

import logging
from typing import Any

from app.application.interfaces import IUserProfileRepository
from app.domain.entities import UserProfile
from app.domain.enums import UserRole
from app.domain.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)

_COMMON_FIELDS = {"name": "name", "email": "email", "school": "school"}
_STUDENT_FIELDS = {"class_name": "class"}
_TEACHER_FIELDS = {"classes_taught": "classesTaught", "subjects_taught": "subjectsTaught"}


class ProfileService:
    def __init__(self, profile_repo: IUserProfileRepository) -> None:
        self._profiles = profile_repo

    async def get_profile(self, uid: str) -> UserProfile:
        profile = await self._profiles.get(uid)
        if profile is None:
            raise ResourceNotFoundException("userProfile", uid)
        return profile

    async def register(self, profile: UserProfile) -> UserProfile:
        """Create the profile after sign-up. Raises ValidationException if one exists."""
        if await self._profiles.get(profile.uid) is not None:
            raise ValidationException("Profile already exists", field="uid")
        await self._profiles.create(profile)
        logger.info("Registered %s profile for %s", profile.role.value, profile.uid)
        return profile

    async def update_profile(self, uid: str, changes: dict[str, Any]) -> UserProfile:
        """Apply changes allowed for the user's role; other keys are ignored.

        Students may change their class; teachers their classes and subjects.
        """
        profile = await self.get_profile(uid)
        allowed = dict(_COMMON_FIELDS)
        allowed.update(_TEACHER_FIELDS if profile.role == UserRole.TEACHER else _STUDENT_FIELDS)
        fields = {
            stored: changes[attr]
            for attr, stored in allowed.items()
            if attr in changes and changes[attr] is not None
        }
        if not fields:
            raise ValidationException("No profile fields to update")
        for attr, stored in allowed.items():
            if stored in fields:
                setattr(profile, attr, fields[stored])
        profile.validate()
        await self._profiles.update(uid, fields)
        return profile
