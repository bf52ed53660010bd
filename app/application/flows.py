"""Tutor prompt flows: typed input/output models and one function per flow.

Each flow renders its prompt, runs it on the chosen model and returns the
validated output model. Failures surface as InferenceException.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.application.interfaces.services import IPromptExecutor

# Prompt names; the inference layer keys its templates by these
TUTOR_RESPONSE = "tutor_response"
GUIDED_RESPONSE = "guided_response"
TEACHING_STYLE = "teaching_style"
GUARDRAILS = "guardrails"
CHAT_TITLE = "chat_title"


class TutorResponseInput(BaseModel):
    problem_statement: str = Field(..., min_length=1, description="The student's message")
    system_prompt: str | None = Field(
        default=None, description="Teacher prompt; the Lyra default is used when omitted"
    )
    example_good_answers: list[str] | None = None


class TutorResponseOutput(BaseModel):
    tutor_response: str = Field(
        ..., description="The tutor's reply: hints, analogies and questions, not the answer"
    )


class GuidedResponseInput(BaseModel):
    student_question: str = Field(..., min_length=1)
    teacher_examples: list[str] = Field(default_factory=list)
    system_prompt: str


class GuidedResponseOutput(BaseModel):
    ai_response: str = Field(..., description="Reply guided by the teacher's examples")


class TeachingStyleInput(BaseModel):
    system_prompt: str
    example_good_answers: str | None = Field(
        default=None, description="Examples of good answers, as free text"
    )


class TeachingStyleOutput(BaseModel):
    updated_system_prompt: str = Field(..., description="The updated system prompt")


class GuardrailsInput(BaseModel):
    user_input: str = Field(..., min_length=1)
    system_prompt: str


class GuardrailsOutput(BaseModel):
    ai_response: str = Field(..., description="Reply that follows the ethical guidelines")


class ChatTitleInput(BaseModel):
    first_message: str = Field(..., min_length=1)


class ChatTitleOutput(BaseModel):
    title: str = Field(..., description="Short conversation title")


async def generate_ai_tutor_response(
    executor: IPromptExecutor, data: TutorResponseInput, model_id: str | None = None
) -> TutorResponseOutput:
    return await executor.run(TUTOR_RESPONSE, data, TutorResponseOutput, model_id)


async def generate_guided_response(
    executor: IPromptExecutor, data: GuidedResponseInput, model_id: str | None = None
) -> GuidedResponseOutput:
    """Answer a sample student question the way the teacher's settings would."""
    return await executor.run(GUIDED_RESPONSE, data, GuidedResponseOutput, model_id)


async def customize_ai_teaching_style(
    executor: IPromptExecutor, data: TeachingStyleInput, model_id: str | None = None
) -> TeachingStyleOutput:
    return await executor.run(TEACHING_STYLE, data, TeachingStyleOutput, model_id)


async def implement_ethical_ai_guardrails(
    executor: IPromptExecutor, data: GuardrailsInput, model_id: str | None = None
) -> GuardrailsOutput:
    return await executor.run(GUARDRAILS, data, GuardrailsOutput, model_id)


async def generate_chat_title(
    executor: IPromptExecutor, data: ChatTitleInput, model_id: str | None = None
) -> ChatTitleOutput:
    output = await executor.run(CHAT_TITLE, data, ChatTitleOutput, model_id)
    return ChatTitleOutput(title=output.title.strip().strip('"'))
