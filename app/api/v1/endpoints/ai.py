"""Inference endpoints: run a single prompt flow and return its output.

Each call goes to a paid model API, so every POST is rate-limited and
requires a signed-in user.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import CurrentUser, get_prompt_executor
from app.application.flows import (
    ChatTitleOutput,
    GuardrailsOutput,
    GuidedResponseOutput,
    TeachingStyleOutput,
    TutorResponseOutput,
    customize_ai_teaching_style,
    generate_ai_tutor_response,
    generate_chat_title,
    generate_guided_response,
    implement_ethical_ai_guardrails,
)
from app.core.config import get_settings
from app.core.limiter import limit_inference
from app.infrastructure.inference import AI_MODELS, PromptExecutor
from app.schemas.ai import (
    AIModelResponse,
    ChatTitleRequest,
    GuardrailsRequest,
    GuidedResponseRequest,
    TeachingStyleRequest,
    TutorResponseRequest,
)

router = APIRouter()

Executor = Annotated[PromptExecutor, Depends(get_prompt_executor)]


@router.get("/models", response_model=list[AIModelResponse])
def list_models() -> list[AIModelResponse]:
    """Selectable chat models; is_default marks the configured default."""
    default = get_settings().default_ai_model
    return [
        AIModelResponse(id=m.id, label=m.label, provider=m.provider, is_default=m.id == default)
        for m in AI_MODELS
    ]


@router.post("/tutor-response", response_model=TutorResponseOutput)
@limit_inference
async def tutor_response(
    request: Request,
    body: TutorResponseRequest,
    user: CurrentUser,
    executor: Executor,
) -> TutorResponseOutput:
    """Socratic tutor reply to a student's problem statement."""
    return await generate_ai_tutor_response(executor, body, body.model)


@router.post("/guided-response", response_model=GuidedResponseOutput)
@limit_inference
async def guided_response(
    request: Request,
    body: GuidedResponseRequest,
    user: CurrentUser,
    executor: Executor,
) -> GuidedResponseOutput:
    """Reply to a sample question guided by a teacher's prompt and examples."""
    return await generate_guided_response(executor, body, body.model)


@router.post("/teaching-style", response_model=TeachingStyleOutput)
@limit_inference
async def teaching_style(
    request: Request,
    body: TeachingStyleRequest,
    user: CurrentUser,
    executor: Executor,
) -> TeachingStyleOutput:
    """Rewrite a system prompt to follow the teacher's example answers."""
    return await customize_ai_teaching_style(executor, body, body.model)


@router.post("/guardrails", response_model=GuardrailsOutput)
@limit_inference
async def guardrails(
    request: Request,
    body: GuardrailsRequest,
    user: CurrentUser,
    executor: Executor,
) -> GuardrailsOutput:
    return await implement_ethical_ai_guardrails(executor, body, body.model)


@router.post("/chat-title", response_model=ChatTitleOutput)
@limit_inference
async def chat_title(
    request: Request,
    body: ChatTitleRequest,
    user: CurrentUser,
    executor: Executor,
) -> ChatTitleOutput:
    return await generate_chat_title(executor, body, body.model)
