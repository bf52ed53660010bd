"""WebSocket endpoints: live chat lists, the live profile, and the developer
permission-error feed.

Each socket authenticates with a Firebase ID token in the query string
(?token=...). Chat and profile sockets stream SubscriptionState changes of a
LiveQuery or LiveDocument as JSON ({"data", "isLoading", "error"}) and
nothing else; the subscription is closed when the client disconnects.
Permission-error records go only to the developer feed.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from app.api.v1.dependencies import (
    CurrentUser,
    get_permission_error_listener,
    websocket_user_store,
)
from app.core.config import get_settings
from app.domain.entities import AuthUser
from app.domain.exceptions import (
    AuthenticationException,
    AuthServiceUnavailableException,
    FirestoreNotConfiguredException,
)
from app.infrastructure.firebase.descriptors import DocumentDescriptor, QueryDescriptor
from app.infrastructure.firebase.live import LiveDocument, LiveQuery
from app.infrastructure.firebase.repositories.chat_repo_firestore import (
    messages_query,
    sessions_query,
)
from app.infrastructure.firebase.repositories.user_profile_repo_firestore import (
    profile_document,
)
from app.infrastructure.messaging import PermissionErrorListener
from app.schemas.websocket import PermissionErrorResponse, WebSocketStatusResponse
from app.shared.context import set_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


async def _authenticate(websocket: WebSocket) -> AuthUser | None:
    """Verify ?token= and make the user the current actor; reject and return None on failure."""
    token = websocket.query_params.get("token")
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return None
    try:
        user = await websocket.app.state.firebase_auth.verify_id_token(token)
    except AuthServiceUnavailableException as e:
        await _reject_websocket(websocket, e.message, code=1011)
        return None
    except AuthenticationException:
        await _reject_websocket(websocket, "Invalid token")
        return None
    set_current_user(user)
    return user


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


async def _stream(
    websocket: WebSocket,
    live_type: type[LiveQuery] | type[LiveDocument],
    descriptor_for: Callable[[AuthUser], QueryDescriptor | DocumentDescriptor],
) -> None:
    """Authenticate, then stream a live subscription until the client goes away."""
    user = await _authenticate(websocket)
    if user is None:
        return
    try:
        store = websocket_user_store(websocket, user)
    except FirestoreNotConfiguredException as e:
        await _reject_websocket(websocket, e.message, code=1011)
        return
    manager = websocket.app.state.ws_manager
    descriptor = descriptor_for(user)
    await manager.connect(websocket, user.uid)
    live = live_type(store, websocket.app.state.event_channel, websocket.app.state.firebase_auth)

    async def _forward() -> None:
        async for state in live.changes():
            await websocket.send_json(jsonable_encoder(state.to_dict()))

    try:
        async with live:
            live.bind(descriptor)
            forward = asyncio.create_task(_forward())
            await _wait_for_disconnect(websocket)
            forward.cancel()
            await asyncio.gather(forward, return_exceptions=True)
    finally:
        await manager.disconnect(websocket)
        logger.debug("Live %s closed for %s", descriptor.path, user.uid)


@router.websocket("/chat/sessions")
async def chat_sessions_socket(websocket: WebSocket):
    """Live list of the user's chat sessions, newest first."""
    await _stream(websocket, LiveQuery, lambda user: sessions_query(user.uid))


@router.websocket("/chat/sessions/{chat_id}/messages")
async def chat_messages_socket(websocket: WebSocket, chat_id: str):
    """Live list of one chat's messages, oldest first."""
    await _stream(websocket, LiveQuery, lambda user: messages_query(user.uid, chat_id))


@router.websocket("/users/me")
async def profile_socket(websocket: WebSocket):
    """Live profile of the signed-in user; data is null until the profile is registered."""
    await _stream(websocket, LiveDocument, lambda user: profile_document(user.uid))


@router.websocket("/dev/permission-errors")
async def permission_errors_socket(websocket: WebSocket):
    """Developer overlay feed: every permission error as it is published (debug only).

    Recent errors are replayed on connect, newest first.
    """
    if not get_settings().debug:
        await _reject_websocket(websocket, "Not available")
        return
    user = await _authenticate(websocket)
    if user is None:
        return
    manager = websocket.app.state.ws_manager
    listener: PermissionErrorListener = websocket.app.state.permission_errors
    await manager.connect(websocket, user.uid, overlay=True)
    try:
        for event in listener.recent():
            await websocket.send_json(event.to_dict())
        await _wait_for_disconnect(websocket)
    finally:
        await manager.disconnect(websocket)


@router.get("/status", response_model=WebSocketStatusResponse)
async def websocket_status(request: Request, user: CurrentUser) -> WebSocketStatusResponse:
    """Number of open WebSocket connections."""
    count = await request.app.state.ws_manager.get_connection_count()
    return WebSocketStatusResponse(total_connections=count)


@router.get("/dev/permission-errors/recent", response_model=list[PermissionErrorResponse])
def recent_permission_errors(
    user: CurrentUser,
    listener: Annotated[PermissionErrorListener, Depends(get_permission_error_listener)],
) -> list[PermissionErrorResponse]:
    """The signed-in user's recent permission errors, newest first (debug only)."""
    if not get_settings().debug:
        raise HTTPException(status_code=404, detail="Not found")
    return [
        PermissionErrorResponse(
            uid=e.uid,
            method=e.method,
            path=e.path,
            message=e.message,
            request=e.request,
            timestamp=e.timestamp,
        )
        for e in listener.recent(user.uid)
    ]
