"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IChatRepository,
    ITeacherSettingsRepository,
    IUserProfileRepository,
)
from app.application.interfaces.services import IPromptExecutor

__all__ = [
    "IChatRepository",
    "IPromptExecutor",
    "ITeacherSettingsRepository",
    "IUserProfileRepository",
]
