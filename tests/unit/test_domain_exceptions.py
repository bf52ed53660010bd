"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    AuthServiceUnavailableException,
    FirestoreNotConfiguredException,
    InferenceException,
    LyraException,
    ResourceNotFoundException,
    ValidationException,
)


def test_lyra_exception_default_error_code() -> None:
    """Base LyraException uses class name as error_code when not provided."""
    exc = LyraException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "LyraException"
    assert exc.details == {}


def test_lyra_exception_to_dict() -> None:
    exc = LyraException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Subject is required for a new chat.", field="subject")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "subject"}
    assert ValidationException("Invalid").details == {}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_with_resource_and_action() -> None:
    exc = AuthorizationException(resource="teacherSettings", action="update")
    assert exc.message == "Permission denied: update on teacherSettings"
    assert exc.error_code == "AUTHORIZATION_ERROR"
    assert exc.details == {"resource": "teacherSettings", "action": "update"}


def test_authorization_exception_default() -> None:
    exc = AuthorizationException()
    assert exc.message == "Permission denied"
    assert exc.details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("chatSession", "c1")
    assert exc.message == "chatSession not found: c1"
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "chatSession", "resource_id": "c1"}


def test_auth_service_unavailable_exception() -> None:
    exc = AuthServiceUnavailableException()
    assert exc.message == "Auth service not provided"
    assert exc.error_code == "AUTH_SERVICE_UNAVAILABLE"


def test_firestore_not_configured_exception() -> None:
    assert FirestoreNotConfiguredException().error_code == "FIRESTORE_NOT_CONFIGURED"


def test_inference_exception_details() -> None:
    exc = InferenceException("boom", model_id="openai:gpt-5-mini", prompt_name="chat_title")
    assert exc.error_code == "INFERENCE_ERROR"
    assert exc.details == {"model_id": "openai:gpt-5-mini", "prompt": "chat_title"}
    assert InferenceException("boom").details == {}
