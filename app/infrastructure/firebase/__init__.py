"""Firestore (REST) and Firebase Auth integration."""

from app.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
    resolve_project_id,
)

__all__ = [
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
    "resolve_project_id",
]
