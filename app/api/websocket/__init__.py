"""WebSocket connection manager and dependencies.

Used by the WebSocket endpoints to track connections and feed the overlay.
"""

from app.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
