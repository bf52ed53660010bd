"""Chat endpoints: talk to the tutor, list and delete the user's chats.

All routes act for the signed-in user; Firestore calls carry the user's ID
token, so the store's Security Rules see the same request.auth.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import CurrentUser, get_chat_service
from app.application.services import ChatService
from app.core.limiter import limit_inference
from app.schemas.chat import (
    ChatSessionResponse,
    DeleteHistoryResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
)

router = APIRouter()

Chats = Annotated[ChatService, Depends(get_chat_service)]


@router.post("/messages", response_model=SendMessageResponse)
@limit_inference
async def send_message(
    request: Request,
    body: SendMessageRequest,
    user: CurrentUser,
    chats: Chats,
) -> SendMessageResponse:
    """Send a message to the tutor; starts a new chat when chat_id is omitted.

    The user and assistant messages are stored in the background: the reply
    is returned before Firestore confirms the writes.
    """
    reply = await chats.send_message(
        user.uid,
        body.content,
        chat_id=body.chat_id,
        subject=body.subject,
        model_id=body.model,
    )
    return SendMessageResponse(
        chat_id=reply.chat_id,
        message=MessageResponse.model_validate(reply.message),
        session=(
            ChatSessionResponse.model_validate(reply.created_session)
            if reply.created_session
            else None
        ),
    )


@router.get("/sessions", response_model=list[ChatSessionResponse])
async def list_sessions(user: CurrentUser, chats: Chats) -> list[ChatSessionResponse]:
    """The user's chats, newest first."""
    sessions = await chats.list_sessions(user.uid)
    return [ChatSessionResponse.model_validate(s) for s in sessions]


@router.get("/sessions/{chat_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    chat_id: str, user: CurrentUser, chats: Chats
) -> list[MessageResponse]:
    """Messages of one chat, oldest first."""
    messages = await chats.list_messages(user.uid, chat_id)
    return [MessageResponse.model_validate(m) for m in messages]


@router.delete("/sessions/{chat_id}", status_code=204)
async def delete_session(chat_id: str, user: CurrentUser, chats: Chats) -> None:
    """Delete one chat and its messages."""
    await chats.delete_session(user.uid, chat_id)


@router.delete("/sessions", response_model=DeleteHistoryResponse)
async def delete_history(user: CurrentUser, chats: Chats) -> DeleteHistoryResponse:
    """Delete all of the user's chats."""
    return DeleteHistoryResponse(deleted=await chats.delete_history(user.uid))
