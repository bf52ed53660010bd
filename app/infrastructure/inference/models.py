"""Registry of selectable chat models.

Ids are "<provider>:<model>". Unknown ids fall back to the default model so a
stale id stored on an old chat session still gets an answer.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AIModel:
    id: str
    label: str
    provider: str
    model: str


AI_MODELS: tuple[AIModel, ...] = (
    AIModel("openai:gpt-5-nano", "ChatGPT · GPT-5 Nano", "openai", "gpt-5-nano"),
    AIModel("openai:gpt-5-mini", "ChatGPT · GPT-5 Mini", "openai", "gpt-5-mini"),
    AIModel("openai:gpt-5.2", "ChatGPT · GPT-5.2", "openai", "gpt-5.2"),
    AIModel("google:gemini-3-flash", "Gemini · 3 Flash", "google", "gemini-3-flash"),
    AIModel("google:gemini-3.1-pro", "Gemini · 3.1 Pro", "google", "gemini-3.1-pro"),
    AIModel("deepseek:deepseek-chat", "DeepSeek · V3.2 (Non-thinking)", "deepseek", "deepseek-chat"),
    AIModel(
        "deepseek:deepseek-reasoner", "DeepSeek · V3.2 (Thinking)", "deepseek", "deepseek-reasoner"
    ),
)

DEFAULT_AI_MODEL = "openai:gpt-5-mini"

_BY_ID = {model.id: model for model in AI_MODELS}


def get_model_config(model_id: str | None, default: str = DEFAULT_AI_MODEL) -> AIModel:
    """Return the registered model for model_id, else default, else the built-in default."""
    if model_id and model_id in _BY_ID:
        return _BY_ID[model_id]
    return _BY_ID.get(default) or _BY_ID[DEFAULT_AI_MODEL]
