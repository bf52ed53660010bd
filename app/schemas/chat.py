"""Chat API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import MessageRole


class SendMessageRequest(BaseModel):
    """Request body for POST /chat/messages.

    Without chat_id a new session is started and subject is required.
    """

    content: str = Field(..., min_length=1, max_length=20000)
    chat_id: str | None = None
    subject: str | None = Field(default=None, max_length=200)
    model: str | None = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    role: MessageRole
    content: str
    created_at: datetime | None = None


class ChatSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    subject: str
    model: str | None = None
    start_time: datetime | None = None


class SendMessageResponse(BaseModel):
    """Tutor reply; session is set only when the message started a new chat."""

    chat_id: str
    message: MessageResponse
    session: ChatSessionResponse | None = None


class DeleteHistoryResponse(BaseModel):
    deleted: int = Field(..., description="Number of chat sessions removed")
