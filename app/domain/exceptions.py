"""Domain exceptions for the Lyra application.

Defines domain-level exceptions that represent business rule violations
and failed calls to the managed services. Presentation layer maps them to
HTTP responses in exception handlers.
"""

from typing import Any


class LyraException(Exception):
    """Base exception for all Lyra application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LyraException):
    """Raised when input validation fails (e.g. missing subject for a new chat)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(LyraException):
    """Raised when authentication fails (e.g. missing or invalid ID token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(LyraException):
    """Raised when the user lacks the role or assignment for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'teacherSettings').
            action: Optional action that was attempted (e.g. 'update').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "AUTHORIZATION_ERROR", details)


class ResourceNotFoundException(LyraException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'chatSession', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class AuthServiceUnavailableException(LyraException):
    """Raised when Firebase Auth is not configured or not yet initialized.

    Surfaced directly to the caller (HTTP 503 / WebSocket close), never
    through the permission-error channel.
    """

    def __init__(self, message: str = "Auth service not provided") -> None:
        super().__init__(message, "AUTH_SERVICE_UNAVAILABLE")


class FirestoreNotConfiguredException(LyraException):
    """Raised when an operation needs Firestore but no credentials were configured."""

    def __init__(self) -> None:
        super().__init__(
            "Firestore is not configured. Set FIREBASE_PROJECT_ID or a service "
            "account (FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH).",
            "FIRESTORE_NOT_CONFIGURED",
        )


class InferenceException(LyraException):
    """Raised when a prompt execution request fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        *,
        model_id: str | None = None,
        prompt_name: str | None = None,
    ) -> None:
        """Initialize with message and optional model/prompt context.

        Args:
            message: Description of the failure.
            model_id: Registry id of the model that was called.
            prompt_name: Name of the prompt template that was rendered.
        """
        details: dict[str, Any] = {}
        if model_id:
            details["model_id"] = model_id
        if prompt_name:
            details["prompt"] = prompt_name
        super().__init__(message, "INFERENCE_ERROR", details)
