"""Pydantic request/response schemas for the API."""

from app.schemas.chat import (
    ChatSessionResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.teacher import TeacherSettingsResponse, TeacherSettingsUpdate
from app.schemas.user import ProfileCreateRequest, ProfileResponse, ProfileUpdate
from app.schemas.websocket import PermissionErrorResponse, WebSocketStatusResponse

__all__ = [
    "ChatSessionResponse",
    "HealthResponse",
    "MessageResponse",
    "PermissionErrorResponse",
    "ProfileCreateRequest",
    "ProfileResponse",
    "ProfileUpdate",
    "ReadinessResponse",
    "SendMessageRequest",
    "SendMessageResponse",
    "TeacherSettingsResponse",
    "TeacherSettingsUpdate",
    "WebSocketStatusResponse",
]
