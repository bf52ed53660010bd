"""User profile API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.enums import UserRole


class ProfileCreateRequest(BaseModel):
    """Request body for POST /users/me (profile after sign-up).

    uid and email default to the verified token's values.
    """

    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole
    school: str = Field(..., min_length=1, max_length=200)
    email: EmailStr | None = None
    class_name: str | None = Field(default=None, max_length=100)
    classes_taught: list[str] = Field(default_factory=list)
    subjects_taught: list[str] = Field(default_factory=list)


class ProfileUpdate(BaseModel):
    """Request body for PATCH /users/me (partial; role-specific fields)."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    school: str | None = Field(default=None, min_length=1, max_length=200)
    class_name: str | None = Field(default=None, max_length=100)
    classes_taught: list[str] | None = None
    subjects_taught: list[str] | None = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    name: str
    email: str
    role: UserRole
    school: str
    created_at: datetime | None = None
    class_name: str | None = None
    classes_taught: list[str] = Field(default_factory=list)
    subjects_taught: list[str] = Field(default_factory=list)
