"""Inference API schemas.

Flow inputs and outputs are the pydantic models from app.application.flows;
these wrap them with the optional model selection.
"""

from pydantic import BaseModel, Field

from app.application.flows import (
    ChatTitleInput,
    GuardrailsInput,
    GuidedResponseInput,
    TeachingStyleInput,
    TutorResponseInput,
)


class _ModelChoice(BaseModel):
    model: str | None = Field(
        default=None, description="Model id '<provider>:<model>'; default model when omitted"
    )


class TutorResponseRequest(TutorResponseInput, _ModelChoice):
    pass


class GuidedResponseRequest(GuidedResponseInput, _ModelChoice):
    pass


class TeachingStyleRequest(TeachingStyleInput, _ModelChoice):
    pass


class GuardrailsRequest(GuardrailsInput, _ModelChoice):
    pass


class ChatTitleRequest(ChatTitleInput, _ModelChoice):
    pass


class AIModelResponse(BaseModel):
    """One selectable model for GET /ai/models."""

    id: str
    label: str
    provider: str
    is_default: bool = False
