"""Tests for the Firestore REST client against httpx.MockTransport."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    FirestoreError,
    FirestoreRESTClient,
    build_structured_query,
)
from app.infrastructure.firebase._rest_encoding import (
    SERVER_TIMESTAMP,
    decode_fields,
    encode_document,
)
from app.infrastructure.firebase.descriptors import DocumentDescriptor, QueryDescriptor

PREFIX = "projects/demo/databases/(default)/documents"


def _client(handler, **kwargs) -> tuple[FirestoreRESTClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(_record))
    return FirestoreRESTClient("demo", http_client=http, **kwargs), requests


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={})


async def test_get_missing_document_is_not_an_error() -> None:
    client, _ = _client(lambda r: httpx.Response(404, json={"error": {"status": "NOT_FOUND"}}))
    snapshot = await client.document("users/u1").get()
    assert snapshot.exists is False
    assert snapshot.id == "u1"
    assert snapshot.to_dict() is None


async def test_get_document_decodes_fields() -> None:
    body = {
        "name": f"{PREFIX}/users/u1",
        "fields": {"name": {"stringValue": "Ada"}, "classesTaught": {"arrayValue": {}}},
        "updateTime": "2026-01-02T03:04:05.000001Z",
    }
    client, requests = _client(lambda r: httpx.Response(200, json=body))
    snapshot = await client.document("users/u1").get()
    assert snapshot.exists is True
    assert snapshot.to_dict() == {"name": "Ada", "classesTaught": []}
    assert snapshot.update_time == datetime(2026, 1, 2, 3, 4, 5, 1, tzinfo=timezone.utc)
    assert requests[0].url.path.endswith("/documents/users/u1")


async def test_set_with_merge_sends_update_mask_and_server_timestamp() -> None:
    client, requests = _client(_ok)
    await client.document("users/u1").set(
        {"name": "Ada", "createdAt": SERVER_TIMESTAMP}, merge=True
    )
    body = json.loads(requests[0].content)
    (write,) = body["writes"]
    assert requests[0].url.path.endswith(":commit")
    assert write["update"]["name"] == f"{PREFIX}/users/u1"
    assert write["update"]["fields"] == {"name": {"stringValue": "Ada"}}
    assert write["updateMask"] == {"fieldPaths": ["name"]}
    assert write["updateTransforms"] == [
        {"fieldPath": "createdAt", "setToServerValue": "REQUEST_TIME"}
    ]
    assert "currentDocument" not in write


async def test_update_requires_existing_document() -> None:
    client, requests = _client(_ok)
    await client.document("users/u1").update({"school": "Hill"})
    write = json.loads(requests[0].content)["writes"][0]
    assert write["currentDocument"] == {"exists": True}


async def test_add_generates_id_and_requires_absence() -> None:
    client, requests = _client(_ok)
    ref = await client.collection("users/u1/chatSessions").add({"title": "t"})
    assert ref.path.startswith("users/u1/chatSessions/")
    assert ref.id
    write = json.loads(requests[0].content)["writes"][0]
    assert write["currentDocument"] == {"exists": False}
    assert write["update"]["name"] == f"{PREFIX}/{ref.path}"


async def test_create_conflict_raises_document_exists() -> None:
    client, _ = _client(
        lambda r: httpx.Response(409, json={"error": {"status": "ALREADY_EXISTS", "message": "x"}})
    )
    with pytest.raises(DocumentExistsError):
        await client.collection("users").create("u1", {"name": "Ada"})


async def test_denied_request_raises_with_status_name() -> None:
    client, _ = _client(
        lambda r: httpx.Response(
            403,
            json={"error": {"status": "PERMISSION_DENIED", "message": "Missing permissions"}},
        )
    )
    with pytest.raises(FirestoreError) as exc_info:
        await client.document("users/u2").delete()
    assert exc_info.value.code == "PERMISSION_DENIED"
    assert exc_info.value.status_code == 403


async def test_run_query_posts_to_parent_and_skips_empty_results() -> None:
    results = [
        {"readTime": "2026-01-01T00:00:00Z"},
        {"document": {"name": f"{PREFIX}/users/u1/chatSessions/c1", "fields": {}}},
    ]
    client, requests = _client(lambda r: httpx.Response(200, json=results))
    snapshot = await client.collection("users/u1/chatSessions").order_by("startTime", "desc").get()
    assert [d.id for d in snapshot] == ["c1"]
    assert requests[0].url.path.endswith("/documents/users/u1:runQuery")
    body = json.loads(requests[0].content)
    assert body["structuredQuery"]["from"] == [{"collectionId": "chatSessions"}]


async def test_as_user_sends_id_token() -> None:
    client, requests = _client(_ok)
    await client.as_user("id-token-123").document("users/u1").delete()
    assert requests[0].headers["Authorization"] == "Bearer id-token-123"


async def test_listen_document_yields_only_on_change() -> None:
    states = iter(
        [
            {"fields": {"n": {"integerValue": "1"}}},
            {"fields": {"n": {"integerValue": "1"}}},
            {"fields": {"n": {"integerValue": "2"}}},
        ]
    )
    client, requests = _client(lambda r: httpx.Response(200, json=next(states)))

    seen = []
    async for snapshot in client.listen_document(DocumentDescriptor("users/u1"), interval=0.001):
        seen.append(snapshot.data)
        if len(seen) == 2:
            break
    assert seen == [{"n": 1}, {"n": 2}]
    assert len(requests) == 3


def test_structured_query_single_and_composite_filters() -> None:
    single = build_structured_query(QueryDescriptor("users").where("role", "==", "teacher"))
    assert single["where"]["fieldFilter"]["op"] == "EQUAL"

    both = build_structured_query(
        QueryDescriptor("users")
        .where("role", "==", "teacher")
        .where("classesTaught", "array-contains", "7B")
        .limited(5)
    )
    composite = both["where"]["compositeFilter"]
    assert composite["op"] == "AND"
    assert [f["fieldFilter"]["op"] for f in composite["filters"]] == ["EQUAL", "ARRAY_CONTAINS"]
    assert both["limit"] == 5


def test_structured_query_order_direction_is_normalized() -> None:
    query = build_structured_query(QueryDescriptor("users/u1/chatSessions").order("startTime", "desc"))
    assert query["orderBy"] == [{"field": {"fieldPath": "startTime"}, "direction": "DESCENDING"}]


def test_map_and_list_filter_values_keep_their_types() -> None:
    query = build_structured_query(
        QueryDescriptor("users")
        .where("prefs", "==", {"theme": "dark", "langs": ["en", "fr"]})
        .where("class", "in", ["7B", "8A"])
    )
    map_filter, list_filter = (
        f["fieldFilter"]["value"] for f in query["where"]["compositeFilter"]["filters"]
    )
    assert map_filter == {
        "mapValue": {
            "fields": {
                "langs": {
                    "arrayValue": {"values": [{"stringValue": "en"}, {"stringValue": "fr"}]}
                },
                "theme": {"stringValue": "dark"},
            }
        }
    }
    assert list_filter == {
        "arrayValue": {"values": [{"stringValue": "7B"}, {"stringValue": "8A"}]}
    }


def test_encode_then_decode_keeps_nested_values() -> None:
    data = {
        "flag": True,
        "count": 3,
        "ratio": 0.5,
        "tags": ["a", "b"],
        "meta": {"k": None},
        "at": datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    assert decode_fields(encode_document(data)["fields"]) == data


def test_encode_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        encode_document({"x": object()})
