"""In-process messaging: the event channel and its permission-error listener."""

from app.infrastructure.messaging.event_channel import EventCallback, EventChannel
from app.infrastructure.messaging.permission_error_listener import (
    PermissionErrorEvent,
    PermissionErrorListener,
)

__all__ = [
    "EventCallback",
    "EventChannel",
    "PermissionErrorEvent",
    "PermissionErrorListener",
]
