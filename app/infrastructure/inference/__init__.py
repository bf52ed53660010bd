"""Hosted-model inference: model registry, prompt templates, executor."""

from app.infrastructure.inference.executor import PromptExecutor
from app.infrastructure.inference.models import (
    AI_MODELS,
    DEFAULT_AI_MODEL,
    AIModel,
    get_model_config,
)
from app.infrastructure.inference.prompts import PromptRenderer

__all__ = [
    "AI_MODELS",
    "DEFAULT_AI_MODEL",
    "AIModel",
    "PromptExecutor",
    "PromptRenderer",
    "get_model_config",
]
