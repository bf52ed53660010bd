"""Chat application service: send a message to the tutor, list and delete chats."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.application.flows import (
    ChatTitleInput,
    TutorResponseInput,
    generate_ai_tutor_response,
    generate_chat_title,
)
from app.application.interfaces import (
    IChatRepository,
    IPromptExecutor,
    ITeacherSettingsRepository,
    IUserProfileRepository,
)
from app.core.constants import DEFAULT_CHAT_TITLE, INFERENCE_FAILURE_REPLY
from app.domain.entities import ChatSession, Message, TeacherSettings
from app.domain.enums import MessageRole
from app.domain.exceptions import (
    InferenceException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatReply:
    """Result of send_message: the chat the turn went to and the tutor's message."""

    chat_id: str
    message: Message
    created_session: ChatSession | None = None


class ChatService:
    """Student chat with the tutor.

    Message writes are non-blocking (the repository queues them); only the
    session creation is awaited because its id is needed for the messages.
    """

    def __init__(
        self,
        chat_repo: IChatRepository,
        settings_repo: ITeacherSettingsRepository,
        profile_repo: IUserProfileRepository,
        executor: IPromptExecutor,
    ) -> None:
        self._chats = chat_repo
        self._settings = settings_repo
        self._profiles = profile_repo
        self._executor = executor

    async def _title_for(self, content: str, model_id: str | None) -> str:
        try:
            output = await generate_chat_title(
                self._executor, ChatTitleInput(first_message=content), model_id
            )
        except InferenceException as e:
            logger.warning("Chat title generation failed, using default: %s", e)
            return DEFAULT_CHAT_TITLE
        return output.title or DEFAULT_CHAT_TITLE

    async def tutor_settings_for(self, user_id: str, subject: str) -> TeacherSettings | None:
        """Settings of a teacher who teaches subject to the student's class, if any.

        Lookup failures (e.g. rules hiding teacher profiles) fall back to the
        default tutor prompt.
        """
        try:
            profile = await self._profiles.get(user_id)
            if profile is None or not profile.class_name:
                return None
            for teacher in await self._profiles.list_teachers_for_class(profile.class_name):
                if not teacher.teaches(subject):
                    continue
                settings = await self._settings.get(teacher.uid, subject)
                if settings is not None:
                    return settings
        except Exception as e:
            logger.warning("Teacher settings lookup for %s failed: %s", subject, e)
        return None

    async def send_message(
        self,
        user_id: str,
        content: str,
        *,
        chat_id: str | None = None,
        subject: str | None = None,
        model_id: str | None = None,
    ) -> ChatReply:
        """Record the student's message, ask the tutor, record the reply.

        Raises:
            ValidationException: Empty content, or a new chat without subject.
            ResourceNotFoundException: chat_id does not exist.
            InferenceException: The tutor could not answer; an apology message
                has been queued in the chat.
        """
        if not content or not content.strip():
            raise ValidationException("Message content is required", field="content")
        created: ChatSession | None = None
        if chat_id is None:
            if not subject:
                raise ValidationException("Subject is required for a new chat.", field="subject")
            title = await self._title_for(content, model_id)
            created = await self._chats.create_session(
                user_id, title=title, subject=subject, model=model_id
            )
            chat_id = created.id
            logger.info("Created chat session %s for user %s", chat_id, user_id)
        else:
            session = await self._chats.get_session(user_id, chat_id)
            if session is None:
                raise ResourceNotFoundException("chatSession", chat_id)
            subject = subject or session.subject
            model_id = model_id or session.model

        self._chats.add_message(user_id, chat_id, Message(MessageRole.USER, content))

        settings = await self.tutor_settings_for(user_id, subject) if subject else None
        try:
            output = await generate_ai_tutor_response(
                self._executor,
                TutorResponseInput(
                    problem_statement=content,
                    system_prompt=settings.system_prompt if settings else None,
                    example_good_answers=settings.example_answers if settings else None,
                ),
                model_id,
            )
            if not output.tutor_response:
                raise InferenceException(
                    "Failed to get a response from the AI tutor.", model_id=model_id
                )
        except InferenceException:
            logger.exception("Tutor response failed for chat %s", chat_id)
            self._chats.add_message(
                user_id, chat_id, Message(MessageRole.ASSISTANT, INFERENCE_FAILURE_REPLY)
            )
            raise

        reply = Message(MessageRole.ASSISTANT, output.tutor_response)
        self._chats.add_message(user_id, chat_id, reply)
        return ChatReply(chat_id=chat_id, message=reply, created_session=created)

    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        return await self._chats.list_sessions(user_id)

    async def list_messages(self, user_id: str, chat_id: str) -> list[Message]:
        if await self._chats.get_session(user_id, chat_id) is None:
            raise ResourceNotFoundException("chatSession", chat_id)
        return await self._chats.list_messages(user_id, chat_id)

    async def delete_session(self, user_id: str, chat_id: str) -> None:
        if await self._chats.get_session(user_id, chat_id) is None:
            raise ResourceNotFoundException("chatSession", chat_id)
        await self._chats.delete_session(user_id, chat_id)

    async def delete_history(self, user_id: str) -> int:
        """Delete all of the user's chat sessions; return how many were removed."""
        count = await self._chats.delete_all_sessions(user_id)
        logger.info("Deleted %d chat sessions for user %s", count, user_id)
        return count
