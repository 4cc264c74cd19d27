"""Rate limiting configuration using slowapi.

Every code-bearing request to ``/auth`` triggers an outbound call to the
Identity Verifier, so the endpoint is limited per client IP.

The limiter is shared by the process; ``create_app()`` applies the app's
settings to it through ``configure_limiter()``.

Usage in routers:
    from scratch_auth_demo.core.rate_limiting import auth_rate_limit, limiter

    @router.get("/auth")
    @limiter.limit(auth_rate_limit)
    async def auth(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import PlainTextResponse

from scratch_auth_demo.core.config import Settings

# Fallback Retry-After when the limit window cannot be determined
_DEFAULT_RETRY_AFTER = 60

# Global limiter instance
# Configured with in-memory storage (suitable for single-instance deployment)
limiter = Limiter(key_func=get_remote_address)

# Limits set by configure_limiter(), read per request
_limits = {"auth": "30/minute"}


def configure_limiter(config: Settings) -> None:
    """Apply rate-limit settings to the shared limiter.

    Args:
        config: Settings of the application being created.
    """
    limiter.enabled = config.rate_limit_enabled
    _limits["auth"] = config.rate_limit_auth


def auth_rate_limit() -> str:
    """Limit string for ``/auth`` (e.g. ``"30/minute"``)."""
    return _limits["auth"]


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        Plain-text 429 response with a Retry-After header.
    """
    try:
        retry_after = int(exc.limit.limit.get_expiry())
    except AttributeError:
        retry_after = _DEFAULT_RETRY_AFTER

    return PlainTextResponse(
        "Too many requests",
        status_code=429,
        headers={"Retry-After": str(retry_after)},
    )
