"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Requests can also carry an end user's Firebase ID token (see as_user) so
Firestore Security Rules are evaluated for that user.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Writes go through documents:commit so set/merge, update (must exist),
create (must not exist) and server timestamps share one code path.
The REST API has no push channel; listen_query/listen_document poll and
yield only when the result changed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from app.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_fields,
    encode_document,
    split_server_timestamps,
)
from app.infrastructure.firebase.descriptors import (
    DocumentDescriptor,
    QueryDescriptor,
    collection_path,
    thaw,
)
from app.shared.utils.generators import generate_auto_id

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class FirestoreError(Exception):
    """A Firestore request failed. code is the gRPC status name (e.g. PERMISSION_DENIED)."""

    def __init__(self, code: str, message: str, status_code: int | None = None) -> None:
        self.code = code
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


class DocumentExistsError(FirestoreError):
    """Raised when a create finds the document ID already taken."""


class DocumentNotFoundError(FirestoreError):
    """Raised when an update targets a document that does not exist."""


def _raise_for_error(resp: httpx.Response) -> None:
    try:
        payload = resp.json()
    except ValueError:
        payload = {}
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    error = payload.get("error", {}) if isinstance(payload, dict) else {}
    code = error.get("status") or resp.reason_phrase or "UNKNOWN"
    message = error.get("message") or resp.text or "Firestore request failed"
    if resp.status_code == 409 or code == "ALREADY_EXISTS":
        raise DocumentExistsError(code, message, resp.status_code)
    if resp.status_code == 404:
        raise DocumentNotFoundError(code, message, resp.status_code)
    raise FirestoreError(code, message, resp.status_code)


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    *,
    allow_missing: bool = False,
) -> Any:
    """Perform async HTTP request to Firestore REST API.

    With allow_missing, 404 returns None instead of raising.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404 and allow_missing:
        return None
    if resp.status_code not in (200, 204):
        _raise_for_error(resp)
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time state of one document. exists is False for a missing document."""

    id: str
    path: str
    exists: bool
    data: dict[str, Any] = field(default_factory=dict)
    update_time: datetime | None = None

    def to_dict(self) -> dict[str, Any] | None:
        return dict(self.data) if self.exists else None


@dataclass(frozen=True)
class QuerySnapshot:
    """Point-in-time result of a query, in server order."""

    documents: tuple[DocumentSnapshot, ...] = ()

    def __iter__(self):
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def empty(self) -> bool:
        return not self.documents


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


def build_structured_query(descriptor: QueryDescriptor) -> dict[str, Any]:
    """Translate a QueryDescriptor into a runQuery structuredQuery body."""
    structured: dict[str, Any] = {
        "from": [{"collectionId": descriptor.collection_id}],
    }
    field_filters = [
        {
            "fieldFilter": {
                "field": {"fieldPath": f.field},
                "op": _OP_MAP.get(f.op, f.op),
                "value": _encode_value(thaw(f.value)),
            }
        }
        for f in descriptor.filters
    ]
    if len(field_filters) == 1:
        structured["where"] = field_filters[0]
    elif field_filters:
        structured["where"] = {"compositeFilter": {"op": "AND", "filters": field_filters}}
    if descriptor.order_by:
        structured["orderBy"] = [
            {"field": {"fieldPath": o.field}, "direction": o.direction}
            for o in descriptor.order_by
        ]
    if descriptor.limit:
        structured["limit"] = descriptor.limit
    return structured


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self.descriptor = DocumentDescriptor(path)

    @property
    def path(self) -> str:
        return self.descriptor.path

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def parent(self) -> CollectionReference:
        return CollectionReference(self._client, self.descriptor.collection_path)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self._client, collection_path(self.path, collection_id))

    async def get(self) -> DocumentSnapshot:
        """Fetch the document; a missing document yields exists=False."""
        return await self._client.get_document(self.descriptor)

    async def set(self, data: dict[str, Any], *, merge: bool = False) -> None:
        """Create or overwrite the document; with merge, only the given fields change."""
        await self._client.commit([self._client.update_write(self.path, data, merge=merge)])

    async def update(self, data: dict[str, Any]) -> None:
        """Update the given fields; fails with DocumentNotFoundError if missing."""
        await self._client.commit(
            [self._client.update_write(self.path, data, merge=True, exists=True)]
        )

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing."""
        await self._client.commit([{"delete": self._client.document_name(self.path)}])


class Query:
    """Immutable fluent query; each call returns a new Query over a new descriptor."""

    def __init__(self, client: FirestoreRESTClient, descriptor: QueryDescriptor):
        self._client = client
        self.descriptor = descriptor

    def where(self, field_path: str, op: str, value: Any) -> Query:
        return Query(self._client, self.descriptor.where(field_path, op, value))

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> Query:
        return Query(self._client, self.descriptor.order(field_path, direction))

    def limit(self, n: int) -> Query:
        return Query(self._client, self.descriptor.limited(n))

    async def get(self) -> QuerySnapshot:
        return await self._client.run_query(self.descriptor)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        snapshot = await self._client.run_query(self.descriptor)
        for doc in snapshot:
            yield doc


class CollectionReference(Query):
    """Reference to a collection; queries start from here."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        super().__init__(client, QueryDescriptor(path))

    @property
    def path(self) -> str:
        return self.descriptor.path

    @property
    def id(self) -> str:
        return self.descriptor.collection_id

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document; without an id, a new random id is generated."""
        return DocumentReference(
            self._client, collection_path(self.path, document_id or generate_auto_id())
        )

    async def add(self, data: dict[str, Any]) -> DocumentReference:
        """Create a document with a generated id and return its reference."""
        ref = self.document()
        await self._client.commit(
            [self._client.update_write(ref.path, data, exists=False)]
        )
        return ref

    async def create(self, document_id: str, data: dict[str, Any]) -> DocumentReference:
        """Create a document with the given ID (DocumentExistsError if it exists)."""
        ref = self.document(document_id)
        await self._client.commit(
            [self._client.update_write(ref.path, data, exists=False)]
        )
        return ref


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin).

    Authenticates with service account credentials, with an end user's
    Firebase ID token (as_user), or not at all (rules see request.auth == null).
    """

    def __init__(
        self,
        project_id: str,
        credentials=None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        listen_interval: float = 2.0,
        id_token: str | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._id_token = id_token
        self._database = f"projects/{project_id}/databases/(default)"
        self._prefix = f"{self._database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None
        self.listen_interval = listen_interval

    @property
    def project_id(self) -> str:
        return self._project_id

    def as_user(self, id_token: str) -> FirestoreRESTClient:
        """Return a client sharing this HTTP pool that sends the user's ID token."""
        return FirestoreRESTClient(
            self._project_id,
            http_client=self._http,
            listen_interval=self.listen_interval,
            id_token=id_token,
        )

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a bearer token; service account refresh runs in a thread."""
        if self._id_token:
            return self._id_token
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def document_name(self, path: str) -> str:
        return f"{self._prefix}/{path}"

    def collection(self, path: str) -> CollectionReference:
        return CollectionReference(self, path)

    def document(self, path: str) -> DocumentReference:
        return DocumentReference(self, path)

    def update_write(
        self,
        path: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
        exists: bool | None = None,
    ) -> dict[str, Any]:
        """Build a commit Write for set/update/create semantics."""
        plain, stamped = split_server_timestamps(data)
        write: dict[str, Any] = {
            "update": {"name": self.document_name(path), **encode_document(plain)},
        }
        if merge:
            write["updateMask"] = {"fieldPaths": list(plain)}
        if stamped:
            write["updateTransforms"] = [
                {"fieldPath": name, "setToServerValue": "REQUEST_TIME"} for name in stamped
            ]
        if exists is not None:
            write["currentDocument"] = {"exists": exists}
        return write

    async def commit(self, writes: list[dict[str, Any]]) -> dict:
        """Apply writes atomically."""
        url = f"{_BASE}/{self._prefix}:commit"
        return await _request_async(
            self._http,
            url,
            method="POST",
            body={"writes": writes},
            access_token=await self.get_token(),
        )

    async def get_document(self, descriptor: DocumentDescriptor) -> DocumentSnapshot:
        url = f"{_BASE}/{self.document_name(descriptor.path)}"
        out = await _request_async(
            self._http, url, access_token=await self.get_token(), allow_missing=True
        )
        if out is None:
            return DocumentSnapshot(descriptor.id, descriptor.path, exists=False)
        return DocumentSnapshot(
            descriptor.id,
            descriptor.path,
            exists=True,
            data=decode_fields(out.get("fields")),
            update_time=_parse_time(out.get("updateTime")),
        )

    async def run_query(self, descriptor: QueryDescriptor) -> QuerySnapshot:
        parent = self._prefix
        if descriptor.parent_path:
            parent = f"{parent}/{descriptor.parent_path}"
        url = f"{_BASE}/{parent}:runQuery"
        resp = await _request_async(
            self._http,
            url,
            method="POST",
            body={"structuredQuery": build_structured_query(descriptor)},
            access_token=await self.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        docs: list[DocumentSnapshot] = []
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            path = doc.get("name", "").split("/documents/", 1)[-1]
            docs.append(
                DocumentSnapshot(
                    path.rsplit("/", 1)[-1],
                    path,
                    exists=True,
                    data=decode_fields(doc.get("fields")),
                    update_time=_parse_time(doc.get("updateTime")),
                )
            )
        return QuerySnapshot(tuple(docs))

    async def listen_query(
        self, descriptor: QueryDescriptor, interval: float | None = None
    ) -> AsyncIterator[QuerySnapshot]:
        """Yield the query result now and again whenever it changes."""
        previous: QuerySnapshot | None = None
        while True:
            snapshot = await self.run_query(descriptor)
            if snapshot != previous:
                previous = snapshot
                yield snapshot
            await asyncio.sleep(interval or self.listen_interval)

    async def listen_document(
        self, descriptor: DocumentDescriptor, interval: float | None = None
    ) -> AsyncIterator[DocumentSnapshot]:
        """Yield the document state now and again whenever it changes."""
        previous: DocumentSnapshot | None = None
        while True:
            snapshot = await self.get_document(descriptor)
            if snapshot != previous:
                previous = snapshot
                yield snapshot
            await asyncio.sleep(interval or self.listen_interval)
