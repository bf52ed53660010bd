"""Shared utilities: datetime and id generators."""

from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_auto_id

__all__ = [
    "generate_auto_id",
    "utc_now",
    "ensure_utc",
]
