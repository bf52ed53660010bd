"""Developer listener for permission errors.

Subscribes to PERMISSION_ERROR_EVENT, logs every record, keeps the most
recent ones for the debug overlay, and forwards each to an async sink
(the WebSocket manager in debug mode).
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from app.core.constants import PERMISSION_ERROR_EVENT
from app.infrastructure.firebase.errors import FirestorePermissionError
from app.infrastructure.messaging.event_channel import EventChannel
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionErrorEvent:
    """What the overlay shows for one denied request."""

    uid: str | None
    method: str
    path: str
    message: str
    request: dict[str, Any]
    timestamp: str

    @classmethod
    def from_error(cls, error: FirestorePermissionError) -> PermissionErrorEvent:
        return cls(
            uid=error.request.auth.uid if error.request.auth else None,
            method=error.request.method,
            path=error.request.path,
            message=error.message,
            request=error.request.to_dict(),
            timestamp=utc_now().isoformat(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON (WebSocket send)."""
        return {
            "type": PERMISSION_ERROR_EVENT,
            "uid": self.uid,
            "method": self.method,
            "path": self.path,
            "message": self.message,
            "request": self.request,
            "timestamp": self.timestamp,
        }


Sink = Callable[[PermissionErrorEvent], Awaitable[None]]


class PermissionErrorListener:
    """Collects permission errors published on the event channel."""

    def __init__(
        self,
        channel: EventChannel,
        *,
        history: int = 50,
        sink: Sink | None = None,
    ) -> None:
        self._channel = channel
        self._recent: deque[PermissionErrorEvent] = deque(maxlen=history)
        self._sink = sink
        self._sends: set[asyncio.Task] = set()
        self._started = False
        # One bound method, so unsubscribe finds the registered callback.
        self._callback = self._on_error

    def start(self) -> None:
        if not self._started:
            self._channel.subscribe(PERMISSION_ERROR_EVENT, self._callback)
            self._started = True

    def stop(self) -> None:
        if self._started:
            self._channel.unsubscribe(PERMISSION_ERROR_EVENT, self._callback)
            self._started = False

    def recent(self, uid: str | None = None) -> list[PermissionErrorEvent]:
        """Most recent first; only the given user's records when uid is set."""
        events = reversed(self._recent)
        if uid is None:
            return list(events)
        return [e for e in events if e.uid == uid]

    def _on_error(self, error: Any) -> None:
        if not isinstance(error, FirestorePermissionError):
            logger.warning("Ignoring non permission-error payload: %r", error)
            return
        event = PermissionErrorEvent.from_error(error)
        logger.error(
            "Firestore denied %s on %s (uid=%s)", event.method, event.path, event.uid
        )
        logger.debug("%s", event.message)
        self._recent.append(event)
        if self._sink is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; permission error not forwarded")
            return
        task = loop.create_task(self._sink(event))
        self._sends.add(task)
        task.add_done_callback(self._sent)

    def _sent(self, task: asyncio.Task) -> None:
        self._sends.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Forwarding permission error failed: %s", task.exception())
