"""Application layer: interfaces, flows, services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, prompt executor).
"""

from app.application.interfaces import (
    IChatRepository,
    IPromptExecutor,
    ITeacherSettingsRepository,
    IUserProfileRepository,
)

__all__ = [
    "IChatRepository",
    "IPromptExecutor",
    "ITeacherSettingsRepository",
    "IUserProfileRepository",
]
