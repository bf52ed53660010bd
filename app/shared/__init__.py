"""Shared utilities: request context, telemetry, and cross-cutting helpers.

Used by application, infrastructure and API layers. No business logic.
"""

from app.shared.context import (
    clear_current_user,
    get_current_actor_id,
    get_current_user,
    set_current_user,
)
from app.shared.utils import ensure_utc, generate_auto_id, utc_now

__all__ = [
    "set_current_user",
    "clear_current_user",
    "get_current_user",
    "get_current_actor_id",
    "generate_auto_id",
    "utc_now",
    "ensure_utc",
]
