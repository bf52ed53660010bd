"""Teacher endpoints: per-subject tutor settings, the test sandbox, prompt refinement."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import CurrentUser, get_teacher_settings_service
from app.application.services import TeacherSettingsService
from app.core.limiter import limit_inference
from app.schemas.teacher import (
    RefinePromptRequest,
    RefinePromptResponse,
    TeacherSettingsResponse,
    TeacherSettingsUpdate,
    TrySettingsRequest,
    TrySettingsResponse,
)

router = APIRouter()

SettingsService = Annotated[TeacherSettingsService, Depends(get_teacher_settings_service)]


@router.get("/settings/{subject}", response_model=TeacherSettingsResponse)
async def get_settings(
    subject: str, user: CurrentUser, service: SettingsService
) -> TeacherSettingsResponse:
    """Saved settings for the subject, or the defaults when none were saved."""
    settings = await service.get_settings(user.uid, subject)
    return TeacherSettingsResponse.model_validate(settings)


@router.put("/settings/{subject}", response_model=TeacherSettingsResponse)
async def save_settings(
    subject: str,
    body: TeacherSettingsUpdate,
    user: CurrentUser,
    service: SettingsService,
) -> TeacherSettingsResponse:
    """Store the subject's system prompt and example answers (403 unless the user teaches it)."""
    settings = await service.save_settings(
        user.uid, subject, body.system_prompt, body.example_answers
    )
    return TeacherSettingsResponse.model_validate(settings)


@router.post("/settings/test", response_model=TrySettingsResponse)
@limit_inference
async def test_settings(
    request: Request,
    body: TrySettingsRequest,
    user: CurrentUser,
    service: SettingsService,
) -> TrySettingsResponse:
    """Answer a sample question with unsaved settings."""
    output = await service.test_settings(
        body.system_prompt, body.example_answers, body.student_question, body.model
    )
    return TrySettingsResponse(ai_response=output.ai_response)


@router.post("/settings/refine", response_model=RefinePromptResponse)
@limit_inference
async def refine_prompt(
    request: Request,
    body: RefinePromptRequest,
    user: CurrentUser,
    service: SettingsService,
) -> RefinePromptResponse:
    """Rewrite the system prompt around the example answers."""
    output = await service.refine_prompt(body.system_prompt, body.example_answers, body.model)
    return RefinePromptResponse(updated_system_prompt=output.updated_system_prompt)
