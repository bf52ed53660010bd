"""User profile endpoints for the signed-in user."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import CurrentUser, get_profile_service
from app.application.services import ProfileService
from app.domain.entities import UserProfile
from app.schemas.user import ProfileCreateRequest, ProfileResponse, ProfileUpdate

router = APIRouter()

Profiles = Annotated[ProfileService, Depends(get_profile_service)]


@router.get("/me", response_model=ProfileResponse)
async def get_me(user: CurrentUser, profiles: Profiles) -> ProfileResponse:
    return ProfileResponse.model_validate(await profiles.get_profile(user.uid))


@router.post("/me", response_model=ProfileResponse, status_code=201)
async def register_me(
    body: ProfileCreateRequest, user: CurrentUser, profiles: Profiles
) -> ProfileResponse:
    """Create the profile after sign-up; email defaults to the token's email."""
    profile = UserProfile(
        uid=user.uid,
        name=body.name,
        email=body.email or user.email or "",
        role=body.role,
        school=body.school,
        class_name=body.class_name,
        classes_taught=list(body.classes_taught),
        subjects_taught=list(body.subjects_taught),
    )
    return ProfileResponse.model_validate(await profiles.register(profile))


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdate, user: CurrentUser, profiles: Profiles
) -> ProfileResponse:
    """Update name, email, school and the role-specific fields."""
    profile = await profiles.update_profile(user.uid, body.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)
