"""Teacher settings API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TeacherSettingsUpdate(BaseModel):
    """Request body for PUT /teacher/settings/{subject}."""

    system_prompt: str = Field(..., min_length=1)
    example_answers: list[str] = Field(default_factory=list)


class TeacherSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    teacher_id: str
    subject: str
    system_prompt: str
    example_answers: list[str]


class TrySettingsRequest(BaseModel):
    """Try unsaved settings on a sample student question."""

    system_prompt: str = Field(..., min_length=1)
    example_answers: list[str] = Field(default_factory=list)
    student_question: str = Field(..., min_length=1)
    model: str | None = None


class TrySettingsResponse(BaseModel):
    ai_response: str


class RefinePromptRequest(BaseModel):
    system_prompt: str = Field(..., min_length=1)
    example_answers: list[str] = Field(default_factory=list)
    model: str | None = None


class RefinePromptResponse(BaseModel):
    updated_system_prompt: str
