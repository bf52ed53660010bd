"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (shared HTTP client, Firestore,
Firebase Auth, event channel, WebSocket manager, telemetry).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.api.websocket import ConnectionManager
from app.core.config import get_settings
from app.infrastructure.firebase import (
    close_firebase,
    get_firestore_client,
    init_firebase,
    resolve_project_id,
)
from app.infrastructure.firebase.auth import FirebaseAuth
from app.infrastructure.firebase.non_blocking import NonBlockingWriter
from app.infrastructure.inference import PromptExecutor
from app.infrastructure.messaging import EventChannel, PermissionErrorListener
from app.shared.telemetry.telemetry import get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, event channel, Firebase Auth,
    Firestore, non-blocking writer, prompt executor, WebSocket manager,
    permission error listener. Shutdown drains pending writes before
    closing the clients, then flushes tracing (set up in create_app).
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for Firestore and model providers (connection reuse).
    http_client = httpx.AsyncClient(timeout=settings.firestore_timeout_seconds)
    app.state.http_client = http_client

    channel = EventChannel()
    app.state.event_channel = channel

    auth = FirebaseAuth(resolve_project_id())
    app.state.firebase_auth = auth
    if not auth.available:
        logger.warning("No Firebase project configured; authenticated routes return 503")

    init_firebase(http_client)
    app.state.firestore = get_firestore_client()

    app.state.writer = NonBlockingWriter(channel, auth)
    app.state.prompt_executor = PromptExecutor(http_client, settings)

    ws_manager = ConnectionManager()
    app.state.ws_manager = ws_manager

    listener = PermissionErrorListener(
        channel,
        history=settings.permission_error_history,
        sink=ws_manager.send_permission_error if settings.debug else None,
    )
    listener.start()
    app.state.permission_errors = listener

    yield

    # ---- Shutdown ----
    await app.state.writer.drain()
    listener.stop()

    await close_firebase()
    app.state.firestore = None

    await http_client.aclose()
    app.state.http_client = None
    logger.info("HTTP client closed")

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
