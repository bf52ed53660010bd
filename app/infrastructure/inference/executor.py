"""Prompt execution against hosted model providers.

One request per call, no streaming and no retries. The model is asked for a
JSON object matching the flow's output model, which is then validated with
pydantic. Google models use the Gemini generateContent API; OpenAI and
DeepSeek share the OpenAI-compatible chat completions API.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import Settings
from app.domain.exceptions import InferenceException
from app.infrastructure.inference.models import AIModel, get_model_config
from app.infrastructure.inference.prompts import PromptRenderer
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT", bound=BaseModel)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
OPENAI_COMPATIBLE_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "deepseek": "https://api.deepseek.com/v1",
}


def _json_instruction(output_model: type[BaseModel]) -> str:
    fields = ", ".join(
        f'"{name}" ({info.description or "string"})'
        for name, info in output_model.model_fields.items()
    )
    return f"\n\nRespond only with a JSON object with these keys: {fields}."


def _gemini_schema(output_model: type[BaseModel]) -> dict[str, Any]:
    """Gemini responseSchema (OpenAPI subset) for a flat model of string fields."""
    properties = {
        name: {"type": "STRING", "description": info.description or name}
        for name, info in output_model.model_fields.items()
    }
    return {
        "type": "OBJECT",
        "properties": properties,
        "required": [n for n, info in output_model.model_fields.items() if info.is_required()],
    }


class PromptExecutor:
    """Runs named prompts with a shared httpx client.

    Example:
        output = await executor.run(TUTOR_RESPONSE, TutorResponseInput(...), TutorResponseOutput)
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        renderer: PromptRenderer | None = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._renderer = renderer or PromptRenderer()

    def resolve_model(self, model_id: str | None) -> AIModel:
        return get_model_config(model_id, self._settings.default_ai_model)

    @traced("inference.run")
    async def run(
        self,
        prompt_name: str,
        input_model: BaseModel,
        output_model: type[OutputT],
        model_id: str | None = None,
    ) -> OutputT:
        """Render prompt_name with input_model, call the model, validate the reply.

        Raises:
            InferenceException: No API key, transport/HTTP failure, or a reply
                that is not valid JSON for output_model.
        """
        model = self.resolve_model(model_id)
        add_span_attributes(
            **{"inference.prompt": prompt_name, "inference.model": model.id}
        )
        api_key = self._settings.provider_api_key(model.provider)
        if not api_key:
            raise InferenceException(
                f"No API key configured for provider '{model.provider}'",
                model_id=model.id,
                prompt_name=prompt_name,
            )
        prompt = self._renderer.render(prompt_name, input_model.model_dump())
        try:
            if model.provider == "google":
                raw = await self._call_gemini(model, api_key, prompt, output_model)
            else:
                raw = await self._call_openai_compatible(model, api_key, prompt, output_model)
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Inference %s on %s failed: HTTP %s",
                prompt_name,
                model.id,
                e.response.status_code,
            )
            raise InferenceException(
                f"Model provider returned HTTP {e.response.status_code}",
                model_id=model.id,
                prompt_name=prompt_name,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Inference %s on %s failed: %s", prompt_name, model.id, e)
            raise InferenceException(
                "Model provider request failed", model_id=model.id, prompt_name=prompt_name
            ) from e
        try:
            return output_model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Inference %s on %s returned unusable output: %s", prompt_name, model.id, e
            )
            raise InferenceException(
                "Model returned an unexpected response",
                model_id=model.id,
                prompt_name=prompt_name,
            ) from e

    async def _call_gemini(
        self, model: AIModel, api_key: str, prompt: str, output_model: type[BaseModel]
    ) -> str:
        resp = await self._http.post(
            f"{GEMINI_BASE_URL}/models/{model.model}:generateContent",
            headers={"x-goog-api-key": api_key},
            json={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {
                    "responseMimeType": "application/json",
                    "responseSchema": _gemini_schema(output_model),
                },
            },
            timeout=self._settings.inference_timeout_seconds,
        )
        resp.raise_for_status()
        data = resp.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return json.dumps(data)
        return "".join(part.get("text", "") for part in parts)

    async def _call_openai_compatible(
        self, model: AIModel, api_key: str, prompt: str, output_model: type[BaseModel]
    ) -> str:
        base_url = OPENAI_COMPATIBLE_BASE_URLS.get(model.provider)
        if base_url is None:
            raise InferenceException(f"Unsupported provider '{model.provider}'", model_id=model.id)
        resp = await self._http.post(
            f"{base_url}/chat/completions",
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "model": model.model,
                "messages": [
                    {"role": "user", "content": prompt + _json_instruction(output_model)}
                ],
                "response_format": {"type": "json_object"},
            },
            timeout=self._settings.inference_timeout_seconds,
        )
        resp.raise_for_status()
        data = resp.json()
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return json.dumps(data)
