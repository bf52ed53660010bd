"""Tests for PermissionErrorListener (history, per-user filtering, sink forwarding)."""

import asyncio
import json

from app.core.constants import PERMISSION_ERROR_EVENT
from app.domain.entities import AuthUser
from app.domain.enums import SecurityOperation
from app.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP
from app.infrastructure.firebase.errors import FirestorePermissionError, SecurityRuleContext
from app.infrastructure.messaging import EventChannel, PermissionErrorListener


class _Identity:
    def __init__(self, uid: str) -> None:
        self._user = AuthUser(uid=uid)

    def current_user(self) -> AuthUser:
        return self._user


def _error(path: str, uid: str | None = None) -> FirestorePermissionError:
    return FirestorePermissionError(
        SecurityRuleContext(path, SecurityOperation.LIST), _Identity(uid) if uid else None
    )


def test_recent_is_newest_first_and_bounded() -> None:
    channel = EventChannel()
    listener = PermissionErrorListener(channel, history=2)
    listener.start()

    for path in ("users/a/chatSessions", "users/b/chatSessions", "users/c/chatSessions"):
        channel.publish(PERMISSION_ERROR_EVENT, _error(path))

    assert [e.path.rsplit("/", 2)[-2] for e in listener.recent()] == ["c", "b"]


def test_recent_filters_by_uid() -> None:
    channel = EventChannel()
    listener = PermissionErrorListener(channel)
    listener.start()
    channel.publish(PERMISSION_ERROR_EVENT, _error("users/u1/chatSessions", "u1"))
    channel.publish(PERMISSION_ERROR_EVENT, _error("users/u2/chatSessions", "u2"))

    mine = listener.recent("u1")

    assert len(mine) == 1
    assert mine[0].uid == "u1"
    assert mine[0].method == "list"
    assert mine[0].to_dict()["type"] == PERMISSION_ERROR_EVENT


def test_start_is_idempotent_and_stop_unsubscribes() -> None:
    channel = EventChannel()
    listener = PermissionErrorListener(channel)
    listener.start()
    listener.start()
    assert channel.listener_count(PERMISSION_ERROR_EVENT) == 1

    listener.stop()
    channel.publish(PERMISSION_ERROR_EVENT, _error("users/u1"))
    assert listener.recent() == []


def test_non_error_payloads_are_ignored() -> None:
    channel = EventChannel()
    listener = PermissionErrorListener(channel)
    listener.start()
    channel.publish(PERMISSION_ERROR_EVENT, "not an error")
    assert listener.recent() == []


async def test_sink_receives_each_event() -> None:
    channel = EventChannel()
    received = []

    async def sink(event) -> None:
        received.append(event)

    listener = PermissionErrorListener(channel, sink=sink)
    listener.start()
    channel.publish(PERMISSION_ERROR_EVENT, _error("users/u1/chatSessions", "u1"))
    await asyncio.sleep(0)

    assert [e.uid for e in received] == ["u1"]


def test_sink_without_running_loop_is_skipped() -> None:
    channel = EventChannel()

    async def sink(event) -> None:
        raise AssertionError("not expected")

    listener = PermissionErrorListener(channel, sink=sink)
    listener.start()
    channel.publish(PERMISSION_ERROR_EVENT, _error("users/u1"))
    assert len(listener.recent()) == 1


def test_denied_message_write_is_recorded_as_json() -> None:
    channel = EventChannel()
    listener = PermissionErrorListener(channel)
    listener.start()
    channel.publish(
        PERMISSION_ERROR_EVENT,
        FirestorePermissionError(
            SecurityRuleContext(
                "users/u1/chatSessions/c1/messages",
                SecurityOperation.CREATE,
                {"role": "user", "content": "hi", "createdAt": SERVER_TIMESTAMP},
            ),
            _Identity("u1"),
        ),
    )

    record = json.loads(json.dumps(listener.recent()[0].to_dict()))

    assert record["method"] == "create"
    assert record["request"]["resource"]["data"]["createdAt"] == "SERVER_TIMESTAMP"
    assert record["request"]["auth"]["uid"] == "u1"
