"""In-process event channel for permission errors and other app events.

Publishes to callbacks registered per event name. Used by the non-blocking
write helpers and live subscriptions to report denied Firestore requests,
and by the developer error listener to receive them.

The channel is constructed once (see app.core.lifespan) and passed to the
components that publish or subscribe; there is no module-level instance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventCallback = Callable[[Any], None]


class EventChannel:
    """Synchronous publish/subscribe registry keyed by event name.

    - subscribe() appends; the same callback may be registered twice.
    - unsubscribe() removes the first entry that *is* the callback.
    - publish() calls the callbacks registered at call time, in order.
      A failing callback is logged and the rest still run.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventCallback]] = {}

    def subscribe(self, event_name: str, callback: EventCallback) -> None:
        """Register callback for event_name.

        Args:
            event_name: Event to listen for (e.g. PERMISSION_ERROR_EVENT).
            callback: Called with the payload on each publish.
        """
        if event_name not in self._listeners:
            self._listeners[event_name] = []
        self._listeners[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: EventCallback) -> None:
        """Remove callback from event_name. No-op if either is unknown."""
        callbacks = self._listeners.get(event_name)
        if not callbacks:
            return
        for index, registered in enumerate(callbacks):
            if registered is callback:
                del callbacks[index]
                return

    def publish(self, event_name: str, payload: Any) -> None:
        """Invoke every callback registered for event_name with payload.

        Iterates over a copy so callbacks may (un)subscribe while running.
        """
        callbacks = self._listeners.get(event_name)
        if not callbacks:
            logger.debug("No listeners for %s, dropping event", event_name)
            return
        for callback in list(callbacks):
            try:
                callback(payload)
            except Exception:
                logger.exception("Listener for %s raised; continuing", event_name)

    def listener_count(self, event_name: str) -> int:
        """Return the number of callbacks registered for event_name."""
        return len(self._listeners.get(event_name, ()))
