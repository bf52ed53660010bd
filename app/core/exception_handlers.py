"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import LyraException
from app.infrastructure.firebase._rest_client import FirestoreError

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "AUTHENTICATION_ERROR": 401,
    "AUTHORIZATION_ERROR": 403,
    "PERMISSION_DENIED": 403,
    "VALIDATION_ERROR": 400,
    "AUTH_SERVICE_UNAVAILABLE": 503,
    "FIRESTORE_NOT_CONFIGURED": 503,
    "INFERENCE_ERROR": 502,
}

# Firestore status names surfaced from awaited (not fire-and-forget) store calls
_FIRESTORE_CODE_STATUS: dict[str, int] = {
    "PERMISSION_DENIED": 403,
    "UNAUTHENTICATED": 401,
    "NOT_FOUND": 404,
    "ALREADY_EXISTS": 409,
    "FAILED_PRECONDITION": 409,
    "INVALID_ARGUMENT": 400,
}


def _lyra_exception_handler(request: Request, exc: LyraException) -> JSONResponse:
    """Return JSON from LyraException.to_dict() with appropriate status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _firestore_exception_handler(request: Request, exc: FirestoreError) -> JSONResponse:
    """Return the store's status for known codes, 502 for anything else."""
    status = _FIRESTORE_CODE_STATUS.get(exc.code, 502)
    if status == 502:
        logger.error("Firestore request failed: %s", exc)
    return JSONResponse(
        status_code=status,
        content={"error": exc.code, "message": str(exc), "details": {}},
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: LyraException (and
    subclasses), FirestoreError, RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(LyraException, _lyra_exception_handler)
    app.add_exception_handler(FirestoreError, _firestore_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
