"""Firestore client (REST-based, no firebase-admin).

Initialized at app startup. Service account credentials come from either
FIREBASE_SERVICE_ACCOUNT_KEY (JSON string) or FIREBASE_SERVICE_ACCOUNT_PATH
(file path). Without a service account the client still works when a
project id is known: requests then carry the end user's ID token
(see FirestoreRESTClient.as_user) and Security Rules decide.
"""

import json
import logging
from pathlib import Path

import httpx

from app.core.config import get_settings
from app.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict() -> dict | None:
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def resolve_project_id() -> str:
    """Return FIREBASE_PROJECT_ID, else the service account's project_id, else ''."""
    settings = get_settings()
    if settings.firebase_project_id:
        return settings.firebase_project_id
    try:
        key_dict = _load_key_dict()
    except ValueError:
        logger.exception("Could not read Firebase service account")
        return ""
    return (key_dict or {}).get("project_id", "")


def init_firebase(http_client: httpx.AsyncClient | None = None) -> bool:
    """Initialize the Firestore client (REST API + google-auth).

    Safe to call when nothing is configured (no-op). Idempotent if already
    initialized. On invalid credentials or any initialization error, logs the
    exception and returns False so the app can start without Firestore.

    Args:
        http_client: Shared client from the lifespan; not closed by close_firebase.

    Returns:
        True if Firestore was initialized, False if disabled or on error.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = get_settings()
    try:
        key_dict = _load_key_dict()
        project_id = settings.firebase_project_id or (key_dict or {}).get("project_id")
        if not project_id:
            if key_dict:
                logger.error("Firebase service account JSON missing 'project_id'")
            return False

        cred = _get_credentials(key_dict) if key_dict else None
        _firestore_client = FirestoreRESTClient(
            project_id,
            cred,
            http_client=http_client,
            timeout=settings.firestore_timeout_seconds,
            listen_interval=settings.firestore_listen_interval_seconds,
        )
        logger.info(
            "Firestore client ready (project=%s, service_account=%s)",
            project_id,
            cred is not None,
        )
        return True
    except Exception:
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured.

    Same shape as the Firebase client SDK for the operations we use (all async):
    - await db.collection(path).add(data)
    - await db.document(path).set(data, merge=True)
    - await db.document(path).get() -> DocumentSnapshot
    - async for snap in db.listen_query(descriptor)
    """
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore client closed")
