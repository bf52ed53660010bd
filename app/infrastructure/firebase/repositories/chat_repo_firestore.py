"""Firestore-backed chat repository.

Sessions live in users/{uid}/chatSessions, messages in
users/{uid}/chatSessions/{chat_id}/messages. Session creation is awaited
(its id is needed); message writes go through the NonBlockingWriter.
"""

from __future__ import annotations

from typing import Any

from app.domain.entities.chat import ChatSession, Message
from app.domain.enums import MessageRole
from app.infrastructure.firebase._rest_client import DocumentSnapshot, FirestoreRESTClient
from app.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP
from app.infrastructure.firebase.collections import (
    FIELD_CREATED_AT,
    FIELD_START_TIME,
    chat_session_path,
    chat_sessions_path,
    messages_path,
)
from app.infrastructure.firebase.descriptors import QueryDescriptor
from app.infrastructure.firebase.non_blocking import NonBlockingWriter
from app.shared.utils.datetime import ensure_utc


def sessions_query(uid: str) -> QueryDescriptor:
    """Chat history: newest session first."""
    return QueryDescriptor(chat_sessions_path(uid)).order(FIELD_START_TIME, "desc")


def messages_query(uid: str, chat_id: str) -> QueryDescriptor:
    """Conversation: oldest message first."""
    return QueryDescriptor(messages_path(uid, chat_id)).order(FIELD_CREATED_AT, "asc")


def session_from_snapshot(uid: str, snapshot: DocumentSnapshot) -> ChatSession:
    data = snapshot.data
    return ChatSession(
        id=snapshot.id,
        user_id=data.get("userId") or uid,
        title=data.get("title", ""),
        subject=data.get("subject", ""),
        model=data.get("model"),
        start_time=ensure_utc(data.get(FIELD_START_TIME)),
    )


def message_from_snapshot(snapshot: DocumentSnapshot) -> Message:
    data = snapshot.data
    return Message(
        role=MessageRole(data.get("role", MessageRole.ASSISTANT.value)),
        content=data.get("content", ""),
        id=snapshot.id,
        created_at=ensure_utc(data.get(FIELD_CREATED_AT)),
    )


class FirestoreChatRepository:
    def __init__(self, client: FirestoreRESTClient, writer: NonBlockingWriter) -> None:
        self._client = client
        self._writer = writer

    async def create_session(
        self, uid: str, *, title: str, subject: str, model: str | None = None
    ) -> ChatSession:
        """Create a session document and return it (start_time is server-assigned)."""
        data: dict[str, Any] = {
            "userId": uid,
            "subject": subject,
            "title": title,
            FIELD_START_TIME: SERVER_TIMESTAMP,
        }
        if model:
            data["model"] = model
        ref = await self._client.collection(chat_sessions_path(uid)).add(data)
        return ChatSession(id=ref.id, user_id=uid, title=title, subject=subject, model=model)

    async def get_session(self, uid: str, chat_id: str) -> ChatSession | None:
        snapshot = await self._client.document(chat_session_path(uid, chat_id)).get()
        if not snapshot.exists:
            return None
        return session_from_snapshot(uid, snapshot)

    async def list_sessions(self, uid: str) -> list[ChatSession]:
        snapshot = await self._client.run_query(sessions_query(uid))
        return [session_from_snapshot(uid, doc) for doc in snapshot]

    async def list_messages(self, uid: str, chat_id: str) -> list[Message]:
        snapshot = await self._client.run_query(messages_query(uid, chat_id))
        return [message_from_snapshot(doc) for doc in snapshot]

    def add_message(self, uid: str, chat_id: str, message: Message) -> None:
        """Queue a message write; createdAt is the server commit time."""
        data = message.to_document()
        data[FIELD_CREATED_AT] = SERVER_TIMESTAMP
        self._writer.add_document(self._client.collection(messages_path(uid, chat_id)), data)

    async def delete_session(self, uid: str, chat_id: str) -> None:
        """Delete a session and its messages in one commit."""
        messages = await self._client.collection(messages_path(uid, chat_id)).get()
        writes = [{"delete": self._client.document_name(doc.path)} for doc in messages]
        writes.append({"delete": self._client.document_name(chat_session_path(uid, chat_id))})
        await self._client.commit(writes)

    async def delete_all_sessions(self, uid: str) -> int:
        """Delete every session document of the user in one batch. Returns the count."""
        sessions = await self._client.collection(chat_sessions_path(uid)).get()
        if sessions.empty:
            return 0
        await self._client.commit(
            [{"delete": self._client.document_name(doc.path)} for doc in sessions]
        )
        return len(sessions)
