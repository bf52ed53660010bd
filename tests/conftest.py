"""Pytest configuration and fixtures for lyra.

HTTP tests use app.main:app through httpx.ASGITransport. The transport does
not run the lifespan, so the app_state fixture installs the long-lived
objects the lifespan would create, with in-memory fakes for Firestore
repositories and the model provider. All imports use app.*.
"""

from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from app.api.v1 import dependencies as deps
from app.api.websocket import ConnectionManager
from app.application.services import ChatService, ProfileService, TeacherSettingsService
from app.core.config import get_settings
from app.core.limiter import limiter
from app.domain.entities import AuthUser, ChatSession, Message, TeacherSettings, UserProfile
from app.domain.enums import UserRole
from app.domain.exceptions import AuthenticationException
from app.infrastructure.firebase.non_blocking import NonBlockingWriter
from app.infrastructure.messaging import EventChannel, PermissionErrorListener
from app.main import app
from app.shared.context import get_current_user


class FakeExecutor:
    """IPromptExecutor double: canned output per prompt name, or an exception to raise."""

    def __init__(self) -> None:
        self.responses: dict[str, Any] = {}
        self.calls: list[tuple[str, BaseModel, str | None]] = []

    async def run(self, prompt_name, input_model, output_model, model_id=None):
        self.calls.append((prompt_name, input_model, model_id))
        result = self.responses.get(prompt_name)
        if isinstance(result, Exception):
            raise result
        if result is None:
            result = {name: f"{prompt_name} reply" for name in output_model.model_fields}
        return output_model.model_validate(result)

    def prompts(self) -> list[str]:
        return [name for name, _, _ in self.calls]


class FakeProfileRepo:
    def __init__(self) -> None:
        self.profiles: dict[str, UserProfile] = {}
        self.updates: list[tuple[str, dict]] = []

    async def get(self, uid):
        return self.profiles.get(uid)

    async def create(self, profile):
        self.profiles[profile.uid] = profile

    async def update(self, uid, fields):
        self.updates.append((uid, fields))

    async def list_teachers_for_class(self, class_name):
        return [
            p
            for p in self.profiles.values()
            if p.role == UserRole.TEACHER and class_name in p.classes_taught
        ]


class FakeChatRepo:
    def __init__(self) -> None:
        self.sessions: dict[tuple[str, str], ChatSession] = {}
        self.messages: dict[tuple[str, str], list[Message]] = {}
        self._next_id = 0

    async def create_session(self, uid, *, title, subject, model=None):
        self._next_id += 1
        session = ChatSession(
            id=f"chat{self._next_id}", user_id=uid, title=title, subject=subject, model=model
        )
        self.sessions[(uid, session.id)] = session
        return session

    async def get_session(self, uid, chat_id):
        return self.sessions.get((uid, chat_id))

    async def list_sessions(self, uid):
        return [s for (owner, _), s in reversed(self.sessions.items()) if owner == uid]

    async def list_messages(self, uid, chat_id):
        return list(self.messages.get((uid, chat_id), []))

    def add_message(self, uid, chat_id, message):
        self.messages.setdefault((uid, chat_id), []).append(message)

    async def delete_session(self, uid, chat_id):
        self.sessions.pop((uid, chat_id), None)
        self.messages.pop((uid, chat_id), None)

    async def delete_all_sessions(self, uid):
        keys = [k for k in self.sessions if k[0] == uid]
        for key in keys:
            del self.sessions[key]
        return len(keys)


class FakeSettingsRepo:
    def __init__(self) -> None:
        self.saved: dict[tuple[str, str], TeacherSettings] = {}

    async def get(self, teacher_id, subject):
        return self.saved.get((teacher_id, subject))

    async def save(self, settings):
        self.saved[(settings.teacher_id, settings.subject)] = settings


class FakeAuth:
    """FirebaseAuth double: accepts any token listed in users."""

    available = True

    def __init__(self) -> None:
        self.users: dict[str, AuthUser] = {}

    async def verify_id_token(self, token):
        if token not in self.users:
            raise AuthenticationException("Invalid or expired ID token")
        return self.users[token]

    def current_user(self):
        return get_current_user()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def profile_repo() -> FakeProfileRepo:
    return FakeProfileRepo()


@pytest.fixture
def chat_repo() -> FakeChatRepo:
    return FakeChatRepo()


@pytest.fixture
def settings_repo() -> FakeSettingsRepo:
    return FakeSettingsRepo()


@pytest.fixture
def student() -> UserProfile:
    return UserProfile(
        uid="student1",
        name="Ada",
        email="ada@example.com",
        role=UserRole.STUDENT,
        school="Hill School",
        class_name="7B",
    )


@pytest.fixture
def teacher() -> UserProfile:
    return UserProfile(
        uid="teacher1",
        name="Grace",
        email="grace@example.com",
        role=UserRole.TEACHER,
        school="Hill School",
        classes_taught=["7B"],
        subjects_taught=["Math"],
    )


@pytest.fixture
def app_state(executor, profile_repo, chat_repo, settings_repo):
    """Install lifespan objects and fake-backed services on the app; undo afterwards."""
    get_settings.cache_clear()
    limiter.reset()
    channel = EventChannel()
    auth = FakeAuth()
    auth.users["student-token"] = AuthUser(uid="student1", email="ada@example.com")
    auth.users["teacher-token"] = AuthUser(uid="teacher1", email="grace@example.com")
    app.state.event_channel = channel
    app.state.firebase_auth = auth
    app.state.firestore = None
    app.state.writer = NonBlockingWriter(channel, auth)
    app.state.prompt_executor = executor
    app.state.ws_manager = ConnectionManager()
    listener = PermissionErrorListener(channel)
    listener.start()
    app.state.permission_errors = listener

    app.dependency_overrides[deps.get_chat_service] = lambda: ChatService(
        chat_repo, settings_repo, profile_repo, executor
    )
    app.dependency_overrides[deps.get_teacher_settings_service] = (
        lambda: TeacherSettingsService(settings_repo, profile_repo, executor)
    )
    app.dependency_overrides[deps.get_profile_service] = lambda: ProfileService(profile_repo)
    yield app.state
    listener.stop()
    app.dependency_overrides.clear()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def student_headers() -> dict[str, str]:
    return {"Authorization": "Bearer student-token"}


@pytest.fixture
def teacher_headers() -> dict[str, str]:
    return {"Authorization": "Bearer teacher-token"}
