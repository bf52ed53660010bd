"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"


async def test_ready_is_503_without_firestore(client: AsyncClient, app_state) -> None:
    """GET /api/v1/health/ready reports which backend is missing."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["firestore"] is False
    assert data["auth"] is True


async def test_ready_is_200_when_configured(client: AsyncClient, app_state) -> None:
    app_state.firestore = object()
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
