"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure services (DIP).
"""

from __future__ import annotations

from typing import Protocol, TypeVar

from pydantic import BaseModel

OutputT = TypeVar("OutputT", bound=BaseModel)


class IPromptExecutor(Protocol):
    """Protocol for running a named prompt on a hosted model."""

    async def run(
        self,
        prompt_name: str,
        input_model: BaseModel,
        output_model: type[OutputT],
        model_id: str | None = None,
    ) -> OutputT:
        """Return the validated output; raise InferenceException on failure."""
