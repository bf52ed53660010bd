"""Fire-and-forget Firestore writes.

Each helper schedules the write as an asyncio task and returns at once, so
callers (e.g. the chat service) can answer before the store confirms. A
write that later fails is reported as a FirestorePermissionError on the
event channel; it is never raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

from app.core.constants import PERMISSION_ERROR_EVENT
from app.domain.enums import SecurityOperation
from app.infrastructure.firebase._rest_client import CollectionReference, DocumentReference
from app.infrastructure.firebase.errors import (
    FirestorePermissionError,
    IdentityProvider,
    SecurityRuleContext,
)
from app.infrastructure.messaging.event_channel import EventChannel

logger = logging.getLogger(__name__)


class NonBlockingWriter:
    """Schedules writes and routes their failures to the event channel.

    Pending tasks are kept in a set until done so they are not garbage
    collected mid-flight. Writes are unordered relative to each other.
    """

    def __init__(self, channel: EventChannel, auth: IdentityProvider | None = None) -> None:
        self._channel = channel
        self._auth = auth
        self._pending: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _schedule(self, write: Awaitable[Any], context: SecurityRuleContext) -> None:
        task = asyncio.ensure_future(write)
        self._pending.add(task)

        def _done(t: asyncio.Task) -> None:
            self._pending.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is None:
                return
            logger.warning(
                "Background %s on %s failed: %s",
                context.operation.value,
                context.path,
                exc,
            )
            error = FirestorePermissionError(context, self._auth)
            error.__cause__ = exc
            self._channel.publish(PERMISSION_ERROR_EVENT, error)

        task.add_done_callback(_done)

    def set_document(
        self, document_ref: DocumentReference, data: dict[str, Any], *, merge: bool = False
    ) -> None:
        """Create or overwrite (merge=True: patch) a document without waiting."""
        self._schedule(
            document_ref.set(data, merge=merge),
            SecurityRuleContext(document_ref.path, SecurityOperation.WRITE, data),
        )

    def add_document(self, collection_ref: CollectionReference, data: dict[str, Any]) -> None:
        """Create a document with a generated id without waiting."""
        self._schedule(
            collection_ref.add(data),
            SecurityRuleContext(collection_ref.path, SecurityOperation.CREATE, data),
        )

    def update_document(self, document_ref: DocumentReference, data: dict[str, Any]) -> None:
        """Update fields of an existing document without waiting."""
        self._schedule(
            document_ref.update(data),
            SecurityRuleContext(document_ref.path, SecurityOperation.UPDATE, data),
        )

    def delete_document(self, document_ref: DocumentReference) -> None:
        """Delete a document without waiting."""
        self._schedule(
            document_ref.delete(),
            SecurityRuleContext(document_ref.path, SecurityOperation.DELETE),
        )

    async def drain(self) -> None:
        """Wait for every pending write to finish. Failures are already reported."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
