"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the signed-in user, the per-request Firestore
client, repositories and application services. Long-lived objects (HTTP
client, event channel, writer, executor) are created in the lifespan and
read from app.state here; routes depend only on these dependencies.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.services import ChatService, ProfileService, TeacherSettingsService
from app.domain.entities import AuthUser
from app.domain.exceptions import FirestoreNotConfiguredException
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.auth import FirebaseAuth
from app.infrastructure.firebase.non_blocking import NonBlockingWriter
from app.infrastructure.firebase.repositories import (
    FirestoreChatRepository,
    FirestoreTeacherSettingsRepository,
    FirestoreUserProfileRepository,
)
from app.infrastructure.inference import PromptExecutor
from app.infrastructure.messaging import EventChannel, PermissionErrorListener
from app.shared.context import set_current_user

_http_bearer = HTTPBearer(auto_error=False)


def get_firebase_auth(request: Request) -> FirebaseAuth:
    return request.app.state.firebase_auth


def get_event_channel(request: Request) -> EventChannel:
    return request.app.state.event_channel


def get_writer(request: Request) -> NonBlockingWriter:
    return request.app.state.writer


def get_prompt_executor(request: Request) -> PromptExecutor:
    return request.app.state.prompt_executor


def get_permission_error_listener(request: Request) -> PermissionErrorListener:
    return request.app.state.permission_errors


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    auth: Annotated[FirebaseAuth, Depends(get_firebase_auth)],
) -> AuthUser:
    """Verify the Firebase ID token and make the user the current actor.

    Raises 401 without a bearer token; an invalid token raises
    AuthenticationException (401) and a missing Firebase project
    AuthServiceUnavailableException (503).
    """
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await auth.verify_id_token(credentials.credentials)
    set_current_user(user)
    return user


CurrentUser = Annotated[AuthUser, Depends(get_current_user)]


def _user_store(firestore: FirestoreRESTClient | None, user: AuthUser) -> FirestoreRESTClient:
    if firestore is None:
        raise FirestoreNotConfiguredException()
    return firestore.as_user(user.id_token)


def get_user_store(request: Request, user: CurrentUser) -> FirestoreRESTClient:
    """Firestore client that acts as the signed-in user, so Security Rules apply."""
    return _user_store(request.app.state.firestore, user)


def websocket_user_store(websocket: WebSocket, user: AuthUser) -> FirestoreRESTClient:
    """Same as get_user_store for WebSocket routes (token from ?token=)."""
    return _user_store(websocket.app.state.firestore, user)


UserStore = Annotated[FirestoreRESTClient, Depends(get_user_store)]


def get_profile_repo(store: UserStore) -> FirestoreUserProfileRepository:
    return FirestoreUserProfileRepository(store)


def get_chat_repo(
    store: UserStore,
    writer: Annotated[NonBlockingWriter, Depends(get_writer)],
) -> FirestoreChatRepository:
    """Chat repository; message writes go through the non-blocking writer."""
    return FirestoreChatRepository(store, writer)


def get_teacher_settings_repo(store: UserStore) -> FirestoreTeacherSettingsRepository:
    return FirestoreTeacherSettingsRepository(store)


def get_chat_service(
    chat_repo: Annotated[FirestoreChatRepository, Depends(get_chat_repo)],
    settings_repo: Annotated[
        FirestoreTeacherSettingsRepository, Depends(get_teacher_settings_repo)
    ],
    profile_repo: Annotated[FirestoreUserProfileRepository, Depends(get_profile_repo)],
    executor: Annotated[PromptExecutor, Depends(get_prompt_executor)],
) -> ChatService:
    """Chat service (composition root)."""
    return ChatService(
        chat_repo=chat_repo,
        settings_repo=settings_repo,
        profile_repo=profile_repo,
        executor=executor,
    )


def get_teacher_settings_service(
    settings_repo: Annotated[
        FirestoreTeacherSettingsRepository, Depends(get_teacher_settings_repo)
    ],
    profile_repo: Annotated[FirestoreUserProfileRepository, Depends(get_profile_repo)],
    executor: Annotated[PromptExecutor, Depends(get_prompt_executor)],
) -> TeacherSettingsService:
    """Teacher settings service (composition root)."""
    return TeacherSettingsService(
        settings_repo=settings_repo, profile_repo=profile_repo, executor=executor
    )


def get_profile_service(
    profile_repo: Annotated[FirestoreUserProfileRepository, Depends(get_profile_repo)],
) -> ProfileService:
    return ProfileService(profile_repo=profile_repo)
