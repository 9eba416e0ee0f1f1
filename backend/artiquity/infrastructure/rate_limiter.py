"""Rate Limiting — slowapi budgets for the AI and licensing routers.

Invariants:
    - AI routes share one budget per client IP: rate_limit_requests per
      rate_limit_window_seconds
    - Licensing routes share one budget per OAuth owner (user id, else client
      id): user_rate_limit_requests per user_rate_limit_window_seconds
    - Limits are read from settings on every request
    - Expired windows are evicted by the limits memory storage

Design Decisions:
    - One Limiter in app.state, fixed-window strategy, in-memory storage:
      single-process deployment, budgets reset on restart
    - Limits decorate router-level dependencies with shared scopes so every
      route of a router draws from the same budget
"""

import math
import time

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from artiquity.config import get_settings

AI_SCOPE = "ai"
LICENSING_SCOPE = "licensing"

limiter = Limiter(key_func=get_remote_address)


def ai_limit() -> str:
    settings = get_settings()
    return f"{settings.rate_limit_requests} per {settings.rate_limit_window_seconds} seconds"


def user_limit() -> str:
    settings = get_settings()
    return (
        f"{settings.user_rate_limit_requests} per "
        f"{settings.user_rate_limit_window_seconds} seconds"
    )


def principal_key(request: Request) -> str:
    """Budget key for licensing routes, set by the OAuth principal dependency."""
    principal = getattr(request.state, "oauth_principal", None)
    if principal is None:
        return get_remote_address(request)
    return principal.owner_id


def retry_after_ms(request: Request) -> int | None:
    """Time until the exhausted window of this request resets."""
    current = getattr(request.state, "view_rate_limit", None)
    if current is None:
        return None
    item, identifiers = current
    reset_at, _ = limiter.limiter.get_window_stats(item, *identifiers)
    return max(1, math.ceil((reset_at - time.time()) * 1000))
