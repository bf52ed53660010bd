"""WebSocket connection manager.

Holds active connections per user. Use via app.state.ws_manager (set in
lifespan). Also the sink for the developer permission-error overlay: each
record goes only to connections registered as overlay watchers, so live
chat streams carry nothing but their own SubscriptionState frames.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from app.infrastructure.messaging.permission_error_listener import PermissionErrorEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections keyed by Firebase uid.

    - connect() accepts and tracks; disconnect() forgets.
    - Sends that fail drop the connection (under the lock).
    """

    def __init__(self) -> None:
        self._connections_by_user: dict[str, set[WebSocket]] = {}
        self._websocket_to_user: dict[WebSocket, str] = {}
        self._overlay: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(
        self, websocket: WebSocket, uid: str, *, overlay: bool = False
    ) -> None:
        """Accept and register a connection for uid.

        Args:
            websocket: The WebSocket instance to accept and track.
            uid: Verified user id from the ID token.
            overlay: Receive every permission error (debug overlay).
        """
        await websocket.accept()
        async with self._lock:
            self._connections_by_user.setdefault(uid, set()).add(websocket)
            self._websocket_to_user[websocket] = uid
            if overlay:
                self._overlay.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        self._overlay.discard(websocket)
        uid = self._websocket_to_user.pop(websocket, None)
        if uid and uid in self._connections_by_user:
            conns = self._connections_by_user[uid]
            conns.discard(websocket)
            if not conns:
                del self._connections_by_user[uid]

    async def send_permission_error(self, event: PermissionErrorEvent) -> None:
        """Sink for PermissionErrorListener: every overlay watcher gets the record."""
        async with self._lock:
            targets = list(self._overlay)
        await self._send_to_list(targets, event.to_dict())

    async def _send_to_list(
        self,
        connections: list[WebSocket],
        message: dict[str, Any],
    ) -> None:
        """Send message to a list of connections; remove dead ones under lock."""
        dead: list[WebSocket] = []
        for ws in connections:
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.debug("Dropping WebSocket after failed send: %s", e)
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return len(self._websocket_to_user)
