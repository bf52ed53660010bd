"""Tests for FirebaseAuth (token verification wrapper and the current actor)."""

import pytest

from app.domain.entities import AuthUser
from app.domain.exceptions import AuthenticationException, AuthServiceUnavailableException
from app.infrastructure.firebase import auth as auth_module
from app.infrastructure.firebase.auth import FirebaseAuth
from app.shared.context import clear_current_user, set_current_user

CLAIMS = {
    "sub": "u1",
    "user_id": "u1",
    "email": "ada@example.com",
    "email_verified": True,
    "firebase": {"identities": {"google.com": ["g-1"]}, "sign_in_provider": "google.com"},
}


def _patch_verify(monkeypatch, result=None, error: Exception | None = None) -> list:
    seen: list = []

    def _verify(token, request, audience=None, clock_skew_in_seconds=0):
        seen.append((token, audience))
        if error is not None:
            raise error
        return result

    monkeypatch.setattr(auth_module.google_id_token, "verify_firebase_token", _verify)
    return seen


async def test_verify_returns_user_for_valid_token(monkeypatch) -> None:
    seen = _patch_verify(monkeypatch, CLAIMS)
    user = await FirebaseAuth("demo").verify_id_token("tok")
    assert user.uid == "u1"
    assert user.id_token == "tok"
    assert seen == [("tok", "demo")]


async def test_invalid_token_raises_authentication_exception(monkeypatch) -> None:
    _patch_verify(monkeypatch, error=ValueError("Token expired"))
    with pytest.raises(AuthenticationException):
        await FirebaseAuth("demo").verify_id_token("tok")


async def test_empty_token_is_rejected_without_verifying(monkeypatch) -> None:
    seen = _patch_verify(monkeypatch, CLAIMS)
    with pytest.raises(AuthenticationException):
        await FirebaseAuth("demo").verify_id_token("")
    assert seen == []


async def test_claims_without_subject_are_rejected(monkeypatch) -> None:
    _patch_verify(monkeypatch, {"email": "x@example.com"})
    with pytest.raises(AuthenticationException):
        await FirebaseAuth("demo").verify_id_token("tok")


async def test_unconfigured_project_is_unavailable() -> None:
    auth = FirebaseAuth("")
    assert auth.available is False
    with pytest.raises(AuthServiceUnavailableException):
        await auth.verify_id_token("tok")
    with pytest.raises(AuthServiceUnavailableException):
        auth.current_user()


def test_current_user_reads_the_request_context() -> None:
    auth = FirebaseAuth("demo")
    assert auth.current_user() is None
    user = AuthUser(uid="u1")
    set_current_user(user)
    try:
        assert auth.current_user() is user
    finally:
        clear_current_user()
