"""Health check endpoints. No auth; used for liveness and readiness probes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Firestore or Firebase Auth not configured"}},
)
def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 when Firestore and Firebase Auth are configured, else 503."""
    state = request.app.state
    firestore = getattr(state, "firestore", None) is not None
    auth = getattr(state, "firebase_auth", None)
    result = ReadinessResponse(
        firestore=firestore, auth=bool(auth is not None and auth.available)
    )
    if result.firestore and result.auth:
        return result
    result.status = "not_ready"
    return JSONResponse(status_code=503, content=result.model_dump())
