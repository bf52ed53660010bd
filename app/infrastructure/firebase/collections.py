"""Firestore collection names and paths (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when the first document is written. Use these helpers so paths stay
consistent between services, live subscriptions and Security Rules.

Example:
    from app.infrastructure.firebase.collections import chat_sessions_path

    query = QueryDescriptor(chat_sessions_path(uid)).order(FIELD_START_TIME, "desc")
"""

from app.infrastructure.firebase.descriptors import collection_path

COLLECTION_USERS = "users"
COLLECTION_CHAT_SESSIONS = "chatSessions"
COLLECTION_MESSAGES = "messages"
COLLECTION_TEACHER_SETTINGS = "teacherSettings"

# Field names as stored (camelCase, shared with the web client)
FIELD_START_TIME = "startTime"
FIELD_CREATED_AT = "createdAt"


def user_path(uid: str) -> str:
    return collection_path(COLLECTION_USERS, uid)


def chat_sessions_path(uid: str) -> str:
    """users/{uid}/chatSessions"""
    return collection_path(COLLECTION_USERS, uid, COLLECTION_CHAT_SESSIONS)


def chat_session_path(uid: str, chat_id: str) -> str:
    return collection_path(chat_sessions_path(uid), chat_id)


def messages_path(uid: str, chat_id: str) -> str:
    """users/{uid}/chatSessions/{chat_id}/messages"""
    return collection_path(chat_session_path(uid, chat_id), COLLECTION_MESSAGES)


def teacher_settings_path(document_id: str) -> str:
    return collection_path(COLLECTION_TEACHER_SETTINGS, document_id)
