"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    ai,
    chat,
    health,
    teacher,
    users,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(teacher.router, prefix="/teacher", tags=["teacher"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(ws_endpoint.router, prefix="/ws", tags=["websocket"])
