"""Live query and live document subscriptions.

A subscription is bound to a descriptor (what to watch) and keeps a
SubscriptionState (data, is_loading, error) current from the store's
listen channel. Rebinding to an equal descriptor keeps the open channel;
a different descriptor closes the old channel before opening the new one;
None closes everything and resets the state.

Failures become FirestorePermissionError records: stored in the state and
published on the event channel, after which the channel stays closed until
a different descriptor is bound.

Example:
    async with LiveQuery(store, channel, auth) as sessions:
        sessions.bind(QueryDescriptor(chat_sessions_path(uid)).order("startTime", "desc"))
        async for state in sessions.changes():
            ...
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from app.core.constants import PERMISSION_ERROR_EVENT
from app.domain.enums import SecurityOperation
from app.infrastructure.firebase._rest_client import DocumentSnapshot, QuerySnapshot
from app.infrastructure.firebase.descriptors import DocumentDescriptor, QueryDescriptor
from app.infrastructure.firebase.errors import (
    FirestorePermissionError,
    IdentityProvider,
    SecurityRuleContext,
)
from app.infrastructure.messaging.event_channel import EventChannel

logger = logging.getLogger(__name__)

Record = dict[str, Any]
T = TypeVar("T")
D = TypeVar("D", QueryDescriptor, DocumentDescriptor)


class LiveStore(Protocol):
    """The store side of a subscription (FirestoreRESTClient in the app)."""

    def listen_query(self, descriptor: QueryDescriptor) -> AsyncIterator[QuerySnapshot]: ...

    def listen_document(
        self, descriptor: DocumentDescriptor
    ) -> AsyncIterator[DocumentSnapshot]: ...


@dataclass(frozen=True)
class SubscriptionState(Generic[T]):
    """What a consumer sees. Idle is (None, False, None)."""

    data: T | None = None
    is_loading: bool = False
    error: FirestorePermissionError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "isLoading": self.is_loading,
            "error": self.error.to_dict() if self.error else None,
        }


def to_record(snapshot: DocumentSnapshot) -> Record:
    """Document fields plus 'id' from the document key (key wins over a stored 'id')."""
    return {**snapshot.data, "id": snapshot.id}


_CLOSED = object()


class _LiveSubscription(ABC, Generic[D, T]):
    operation: SecurityOperation

    def __init__(
        self,
        store: LiveStore,
        channel: EventChannel,
        auth: IdentityProvider | None = None,
    ) -> None:
        self._store = store
        self._channel = channel
        self._auth = auth
        self._descriptor: D | None = None
        self._task: asyncio.Task | None = None
        self._state: SubscriptionState[T] = SubscriptionState()
        self._callbacks: list[Callable[[SubscriptionState[T]], None]] = []
        self._queues: set[asyncio.Queue] = set()
        self._memo_warned = False

    @property
    def state(self) -> SubscriptionState[T]:
        return self._state

    @property
    def descriptor(self) -> D | None:
        return self._descriptor

    def bind(self, descriptor: D | None) -> None:
        """Point the subscription at descriptor (None detaches)."""
        if descriptor is None:
            self._teardown()
            self._descriptor = None
            self._set_state(SubscriptionState())
            return
        if self._descriptor is not None and descriptor == self._descriptor:
            if descriptor is not self._descriptor and not self._memo_warned:
                self._memo_warned = True
                logger.warning(
                    "%s for %s was rebuilt instead of reused; descriptor was not memoized",
                    type(self).__name__,
                    descriptor.path,
                )
            return
        self._teardown()
        self._descriptor = descriptor
        self._set_state(SubscriptionState(self._state.data, True, None))
        self._task = asyncio.create_task(self._run(descriptor))

    def on_change(
        self, callback: Callable[[SubscriptionState[T]], None]
    ) -> Callable[[], None]:
        """Call callback with each new state; returns a function that removes it."""
        self._callbacks.append(callback)

        def _remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _remove

    async def changes(self) -> AsyncIterator[SubscriptionState[T]]:
        """Yield the current state, then every new state until close()."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.add(queue)
        try:
            yield self._state
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            self._queues.discard(queue)

    def close(self) -> None:
        """Tear down the listen channel and end changes() iterators."""
        self._teardown()
        for queue in list(self._queues):
            queue.put_nowait(_CLOSED)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        task = self._task
        self.close()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def _teardown(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _set_state(self, state: SubscriptionState[T]) -> None:
        self._state = state
        for callback in list(self._callbacks):
            try:
                callback(state)
            except Exception:
                logger.exception("%s change callback raised", type(self).__name__)
        for queue in self._queues:
            queue.put_nowait(state)

    @abstractmethod
    def _listen(self, descriptor: D) -> AsyncIterator[Any]:
        """Open the store channel for descriptor."""

    @abstractmethod
    def _materialize(self, snapshot: Any) -> T | None:
        """Turn one snapshot into the state's data."""

    async def _run(self, descriptor: D) -> None:
        current = asyncio.current_task()
        try:
            async with aclosing(self._listen(descriptor)) as snapshots:
                async for snapshot in snapshots:
                    if self._task is not current:
                        return
                    self._set_state(SubscriptionState(self._materialize(snapshot), False, None))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._task is not current:
                return
            logger.warning(
                "%s on %s failed: %s", self.operation.value, descriptor.path, exc
            )
            error = FirestorePermissionError(
                SecurityRuleContext(descriptor.path, self.operation), self._auth
            )
            error.__cause__ = exc
            self._set_state(SubscriptionState(None, False, error))
            self._channel.publish(PERMISSION_ERROR_EVENT, error)


class LiveQuery(_LiveSubscription[QueryDescriptor, list[Record]]):
    """Live list of records for a query; each snapshot replaces the list."""

    operation = SecurityOperation.LIST

    def _listen(self, descriptor: QueryDescriptor) -> AsyncIterator[QuerySnapshot]:
        return self._store.listen_query(descriptor)

    def _materialize(self, snapshot: QuerySnapshot) -> list[Record]:
        return [to_record(doc) for doc in snapshot]


class LiveDocument(_LiveSubscription[DocumentDescriptor, Record]):
    """Live single record; data is None when the document does not exist."""

    operation = SecurityOperation.GET

    def _listen(self, descriptor: DocumentDescriptor) -> AsyncIterator[DocumentSnapshot]:
        return self._store.listen_document(descriptor)

    def _materialize(self, snapshot: DocumentSnapshot) -> Record | None:
        return to_record(snapshot) if snapshot.exists else None
