"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Inference endpoints call paid model
APIs and are limited per client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def _inference_limit() -> str:
    return get_settings().inference_rate_limit


limit_inference = limiter.limit(_inference_limit)
