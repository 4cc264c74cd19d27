"""Session cookie helpers.

The session cookie is set and cleared with identical attributes: browsers
only remove a cookie when path/domain/flags match the ones it was set with.
"""

from typing import Any

from starlette.responses import Response

from scratch_auth_demo.core.config import Settings


def cookie_options(settings: Settings) -> dict[str, Any]:
    """Cookie attributes shared by set and clear."""
    return {
        "path": "/",
        "httponly": True,
        "secure": settings.auth_cookie_secure,
        "samesite": settings.auth_cookie_samesite,
    }


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Set the httpOnly session cookie on a response.

    Args:
        response: Outgoing response.
        token: Signed session token.
        settings: Application settings (cookie name, flags, lifetime).
    """
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        **cookie_options(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Expire the session cookie on the client."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        **cookie_options(settings),
    )
