"""WebSocket API schemas."""

from pydantic import BaseModel, Field


class WebSocketStatusResponse(BaseModel):
    """Response for GET /ws/status (connection count)."""

    total_connections: int = Field(..., description="Number of active WebSocket connections")


class PermissionErrorResponse(BaseModel):
    """One recorded permission error (GET /ws/dev/permission-errors/recent)."""

    uid: str | None
    method: str
    path: str
    message: str
    request: dict
    timestamp: str
