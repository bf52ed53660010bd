"""Inference endpoint tests (fake executor via app.state)."""

from httpx import AsyncClient

from app.application.flows import GUARDRAILS, TUTOR_RESPONSE
from app.domain.exceptions import InferenceException
from app.infrastructure.firebase.auth import FirebaseAuth
from app.infrastructure.inference import AI_MODELS


async def test_models_lists_registry_with_default(client: AsyncClient, app_state) -> None:
    response = await client.get("/api/v1/ai/models")
    assert response.status_code == 200
    data = response.json()
    assert [m["id"] for m in data] == [m.id for m in AI_MODELS]
    assert [m["id"] for m in data if m["is_default"]] == ["openai:gpt-5-mini"]


async def test_tutor_response_requires_auth(client: AsyncClient, app_state) -> None:
    response = await client.post("/api/v1/ai/tutor-response", json={"problem_statement": "2+2"})
    assert response.status_code == 401


async def test_invalid_token_is_401(client: AsyncClient, app_state) -> None:
    response = await client.post(
        "/api/v1/ai/tutor-response",
        json={"problem_statement": "2+2"},
        headers={"Authorization": "Bearer forged"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_tutor_response_runs_flow_with_model(
    client: AsyncClient, app_state, executor, student_headers
) -> None:
    executor.responses[TUTOR_RESPONSE] = {"tutor_response": "What do you know already?"}
    response = await client.post(
        "/api/v1/ai/tutor-response",
        json={"problem_statement": "2+2", "model": "google:gemini-3-flash"},
        headers=student_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"tutor_response": "What do you know already?"}
    name, data, model_id = executor.calls[0]
    assert name == TUTOR_RESPONSE
    assert data.problem_statement == "2+2"
    assert model_id == "google:gemini-3-flash"


async def test_guardrails_validation_error_is_422(
    client: AsyncClient, app_state, student_headers
) -> None:
    response = await client.post(
        "/api/v1/ai/guardrails", json={"user_input": ""}, headers=student_headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_inference_failure_is_502(
    client: AsyncClient, app_state, executor, student_headers
) -> None:
    executor.responses[GUARDRAILS] = InferenceException("down", model_id="openai:gpt-5-mini")
    response = await client.post(
        "/api/v1/ai/guardrails",
        json={"user_input": "hi", "system_prompt": "Be kind."},
        headers=student_headers,
    )
    assert response.status_code == 502
    assert response.json()["error"] == "INFERENCE_ERROR"


async def test_auth_not_configured_is_503(
    client: AsyncClient, app_state, student_headers
) -> None:
    app_state.firebase_auth = FirebaseAuth("")
    response = await client.post(
        "/api/v1/ai/chat-title", json={"first_message": "hi"}, headers=student_headers
    )
    assert response.status_code == 503
    assert response.json()["error"] == "AUTH_SERVICE_UNAVAILABLE"
