"""
Rate limiting - per client IP, backed by slowapi.

- Every /api route shares `settings.api_rate_limit` (SlowAPIMiddleware
  applies it as the default limit).
- POST /api/auth/login carries its own stricter `settings.login_rate_limit`.

Exceeding a limit raises RateLimitExceeded, rendered as a 429 error
envelope by app.core.errors.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

settings = get_settings()

LOGIN_LIMIT_MESSAGE = "Too many login attempts, please try again later."

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.api_rate_limit],
    enabled=settings.rate_limit_enabled,
)

login_limit = limiter.limit(settings.login_rate_limit, error_message=LOGIN_LIMIT_MESSAGE)
