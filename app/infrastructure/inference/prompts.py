"""Prompt templates for the tutor flows: prompt name -> Jinja template."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, StrictUndefined, Template

from app.application.flows import (
    CHAT_TITLE,
    GUARDRAILS,
    GUIDED_RESPONSE,
    TEACHING_STYLE,
    TUTOR_RESPONSE,
)
from app.core.constants import DEFAULT_SYSTEM_PROMPT

# Context: the flow's input model fields, plus default_system_prompt
_DEFAULT_PROMPTS: dict[str, str] = {
    TUTOR_RESPONSE: (
        "{% if system_prompt %}{{ system_prompt }}{% else %}{{ default_system_prompt }}"
        " You can also draw diagrams with MermaidJS in ```mermaid code blocks.{% endif %}\n\n"
        "{% if example_good_answers %}Here are some examples of good answers:\n"
        "{% for example in example_good_answers %}- {{ example }}\n{% endfor %}\n{% endif %}"
        "Problem Statement: {{ problem_statement }}"
    ),
    GUIDED_RESPONSE: (
        "{{ system_prompt }}\n\n"
        "Here are some examples of good answers to guide your response:\n"
        "{% for example in teacher_examples %}- {{ example }}\n{% endfor %}\n"
        "Student Question: {{ student_question }}\n\n"
        "AI Response: "
    ),
    TEACHING_STYLE: (
        "You are customizing the system prompt for an AI tutor. "
        "The current system prompt is: {{ system_prompt }}. "
        "Update the system prompt based on teacher customizations."
        "{% if example_good_answers %} If applicable, incorporate the following examples "
        "of good answers: {{ example_good_answers }}.{% endif %} "
        "Return the updated system prompt.\n\n"
        "Updated System Prompt:"
    ),
    GUARDRAILS: "{{ system_prompt }}\n\nUser Input: {{ user_input }}",
    CHAT_TITLE: (
        "Write a short title (at most six words) for a tutoring conversation that "
        "starts with the student message below. Do not answer the message and do not "
        "use quotes.\n\n"
        "Student Message: {{ first_message }}"
    ),
}


class PromptRenderer:
    """Renders a named prompt template with the flow input as context."""

    def __init__(self, templates: dict[str, str] | None = None) -> None:
        self._templates = templates or _DEFAULT_PROMPTS
        # Plain text prompts, not HTML
        self._env = Environment(autoescape=False, undefined=StrictUndefined)
        self._compiled: dict[str, Template] = {
            name: self._env.from_string(source) for name, source in self._templates.items()
        }

    @property
    def names(self) -> list[str]:
        return list(self._compiled)

    def render(self, prompt_name: str, context: dict[str, Any]) -> str:
        """Render the prompt. Raises KeyError if prompt_name is unknown."""
        if prompt_name not in self._compiled:
            raise KeyError(f"Unknown prompt: {prompt_name}")
        return self._compiled[prompt_name].render(
            default_system_prompt=DEFAULT_SYSTEM_PROMPT, **context
        )
