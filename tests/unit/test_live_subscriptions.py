"""Tests for LiveQuery / LiveDocument against an in-memory store."""

import asyncio
import logging

import pytest

from app.core.constants import PERMISSION_ERROR_EVENT
from app.domain.enums import SecurityOperation
from app.infrastructure.firebase._rest_client import DocumentSnapshot, FirestoreError, QuerySnapshot
from app.infrastructure.firebase.descriptors import DocumentDescriptor, QueryDescriptor
from app.infrastructure.firebase.errors import FirestorePermissionError
from app.infrastructure.firebase.live import (
    LiveDocument,
    LiveQuery,
    SubscriptionState,
    _LiveSubscription,
)
from app.infrastructure.messaging.event_channel import EventChannel


class _Store:
    """Listen channels fed by the test: push() a snapshot or an exception per path."""

    def __init__(self) -> None:
        self.feeds: dict[str, asyncio.Queue] = {}
        self.opened: list = []
        self.closed: list = []

    def _feed(self, path: str) -> asyncio.Queue:
        return self.feeds.setdefault(path, asyncio.Queue())

    async def _listen(self, descriptor):
        self.opened.append(descriptor)
        queue = self._feed(descriptor.path)
        try:
            while True:
                item = await queue.get()
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.closed.append(descriptor)

    def listen_query(self, descriptor):
        return self._listen(descriptor)

    def listen_document(self, descriptor):
        return self._listen(descriptor)

    def push(self, path: str, item) -> None:
        self._feed(path).put_nowait(item)


def _doc(path: str, data: dict | None) -> DocumentSnapshot:
    return DocumentSnapshot(
        id=path.rsplit("/", 1)[-1], path=path, exists=data is not None, data=data or {}
    )


def _query(*docs: DocumentSnapshot) -> QuerySnapshot:
    return QuerySnapshot(documents=docs)


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


SESSIONS = "users/u1/chatSessions"


async def test_binding_none_is_idle() -> None:
    live = LiveQuery(_Store(), EventChannel())
    live.bind(None)
    assert live.state == SubscriptionState(None, False, None)


async def test_loading_until_first_snapshot_then_records_with_ids() -> None:
    store = _Store()
    async with LiveQuery(store, EventChannel()) as live:
        live.bind(QueryDescriptor(SESSIONS))
        assert live.state.is_loading is True
        assert live.state.data is None

        store.push(SESSIONS, _query(_doc(f"{SESSIONS}/c1", {"title": "Fractions"})))
        await _settle()

        assert live.state.is_loading is False
        assert live.state.error is None
        assert live.state.data == [{"title": "Fractions", "id": "c1"}]


async def test_document_key_wins_over_stored_id_field() -> None:
    store = _Store()
    async with LiveQuery(store, EventChannel()) as live:
        live.bind(QueryDescriptor(SESSIONS))
        store.push(SESSIONS, _query(_doc(f"{SESSIONS}/c1", {"id": "stale"})))
        await _settle()
        assert live.state.data == [{"id": "c1"}]


async def test_snapshots_replace_never_merge() -> None:
    store = _Store()
    async with LiveQuery(store, EventChannel()) as live:
        live.bind(QueryDescriptor(SESSIONS))
        store.push(
            SESSIONS,
            _query(_doc(f"{SESSIONS}/a", {"n": 1}), _doc(f"{SESSIONS}/b", {"n": 2})),
        )
        await _settle()
        store.push(SESSIONS, _query(_doc(f"{SESSIONS}/c", {"n": 3})))
        await _settle()
        assert live.state.data == [{"n": 3, "id": "c"}]


async def test_missing_document_is_none_and_not_loading() -> None:
    store = _Store()
    async with LiveDocument(store, EventChannel()) as live:
        live.bind(DocumentDescriptor("users/u1"))
        assert live.state == SubscriptionState(None, True, None)

        store.push("users/u1", _doc("users/u1", None))
        await _settle()
        assert live.state == SubscriptionState(None, False, None)

        store.push("users/u1", _doc("users/u1", {"name": "Ada"}))
        await _settle()
        assert live.state.data == {"name": "Ada", "id": "u1"}


async def test_failure_sets_error_state_and_publishes_same_object() -> None:
    store = _Store()
    channel = EventChannel()
    published: list = []
    channel.subscribe(PERMISSION_ERROR_EVENT, published.append)
    async with LiveQuery(store, channel) as live:
        live.bind(QueryDescriptor(SESSIONS))
        store.push(SESSIONS, _query(_doc(f"{SESSIONS}/c1", {})))
        await _settle()
        store.push(SESSIONS, FirestoreError("PERMISSION_DENIED", "denied", 403))
        await _settle()

        error = live.state.error
        assert isinstance(error, FirestorePermissionError)
        assert live.state.data is None
        assert live.state.is_loading is False
        assert error.request.path == "/databases/(default)/documents/users/u1/chatSessions"
        assert error.request.method == "list"
        assert published == [error]
        assert published[0] is error


async def test_document_failure_reports_get() -> None:
    store = _Store()
    channel = EventChannel()
    published: list = []
    channel.subscribe(PERMISSION_ERROR_EVENT, published.append)
    async with LiveDocument(store, channel) as live:
        live.bind(DocumentDescriptor("teacherSettings/t1_Math"))
        store.push("teacherSettings/t1_Math", FirestoreError("PERMISSION_DENIED", "denied", 403))
        await _settle()
        assert published[0].request.method == "get"
        assert published[0].request.path.endswith("/teacherSettings/t1_Math")


async def test_equal_descriptor_keeps_channel_and_warns_once(caplog) -> None:
    store = _Store()
    async with LiveQuery(store, EventChannel()) as live:
        with caplog.at_level(logging.WARNING, logger="app.infrastructure.firebase.live"):
            live.bind(QueryDescriptor(SESSIONS).order("startTime", "desc"))
            await _settle()
            live.bind(QueryDescriptor(SESSIONS).order("startTime", "desc"))
            live.bind(QueryDescriptor(SESSIONS).order("startTime", "desc"))
            await _settle()

        assert len(store.opened) == 1
        assert store.closed == []
        warnings = [r for r in caplog.records if "not memoized" in r.getMessage()]
        assert len(warnings) == 1


async def test_same_descriptor_object_does_not_warn(caplog) -> None:
    store = _Store()
    descriptor = QueryDescriptor(SESSIONS)
    async with LiveQuery(store, EventChannel()) as live:
        with caplog.at_level(logging.WARNING, logger="app.infrastructure.firebase.live"):
            live.bind(descriptor)
            live.bind(descriptor)
            await _settle()
        assert len(store.opened) == 1
        assert not [r for r in caplog.records if "not memoized" in r.getMessage()]


async def test_new_descriptor_closes_old_channel_and_keeps_previous_data() -> None:
    store = _Store()
    other = "users/u1/chatSessions/c1/messages"
    async with LiveQuery(store, EventChannel()) as live:
        live.bind(QueryDescriptor(SESSIONS))
        store.push(SESSIONS, _query(_doc(f"{SESSIONS}/c1", {"title": "t"})))
        await _settle()

        live.bind(QueryDescriptor(other))
        assert live.state.is_loading is True
        assert live.state.data == [{"title": "t", "id": "c1"}]
        await _settle()

        assert [d.path for d in store.closed] == [SESSIONS]
        assert [d.path for d in store.opened] == [SESSIONS, other]

        # A late snapshot on the old path is not delivered.
        store.push(SESSIONS, _query())
        store.push(other, _query(_doc(f"{other}/m1", {"content": "hi"})))
        await _settle()
        assert live.state.data == [{"content": "hi", "id": "m1"}]


async def test_binding_none_after_data_resets_and_closes() -> None:
    store = _Store()
    async with LiveQuery(store, EventChannel()) as live:
        live.bind(QueryDescriptor(SESSIONS))
        store.push(SESSIONS, _query(_doc(f"{SESSIONS}/c1", {})))
        await _settle()

        live.bind(None)
        await _settle()

        assert live.state == SubscriptionState(None, False, None)
        assert len(store.closed) == 1


async def test_rebinding_after_error_reopens() -> None:
    store = _Store()
    async with LiveQuery(store, EventChannel()) as live:
        live.bind(QueryDescriptor(SESSIONS))
        store.push(SESSIONS, FirestoreError("PERMISSION_DENIED", "denied", 403))
        await _settle()
        assert live.state.error is not None

        live.bind(QueryDescriptor("users/u2/chatSessions"))
        assert live.state == SubscriptionState(None, True, None)


async def test_changes_yields_current_then_updates_until_close() -> None:
    store = _Store()
    live = LiveQuery(store, EventChannel())
    seen: list[SubscriptionState] = []

    async def consume() -> None:
        async for state in live.changes():
            seen.append(state)

    consumer = asyncio.create_task(consume())
    await _settle()
    live.bind(QueryDescriptor(SESSIONS))
    store.push(SESSIONS, _query())
    await _settle()
    live.close()
    await asyncio.wait_for(consumer, timeout=1)

    assert seen[0] == SubscriptionState()
    assert seen[1] == SubscriptionState(None, True, None)
    assert seen[-1] == SubscriptionState([], False, None)


async def test_on_change_remover_stops_callbacks() -> None:
    live = LiveQuery(_Store(), EventChannel())
    seen: list = []
    remove = live.on_change(seen.append)
    live.bind(None)
    remove()
    remove()
    live.bind(None)
    assert len(seen) == 1


async def test_raising_callback_does_not_break_the_subscription() -> None:
    live = LiveQuery(_Store(), EventChannel())
    seen: list = []

    def boom(state) -> None:
        raise RuntimeError("view bug")

    live.on_change(boom)
    live.on_change(seen.append)
    live.bind(None)
    assert seen == [SubscriptionState()]


def test_state_to_dict_uses_wire_names() -> None:
    assert SubscriptionState([{"id": "a"}], False, None).to_dict() == {
        "data": [{"id": "a"}],
        "isLoading": False,
        "error": None,
    }


def test_subscription_base_requires_listen_and_materialize() -> None:
    class _NoMaterialize(_LiveSubscription):
        operation = SecurityOperation.GET

        def _listen(self, descriptor):
            return _Store().listen_document(descriptor)

    with pytest.raises(TypeError):
        _LiveSubscription(_Store(), EventChannel())
    with pytest.raises(TypeError):
        _NoMaterialize(_Store(), EventChannel())
