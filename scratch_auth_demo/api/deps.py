"""Shared dependencies for route handlers.

Settings and the token codec are built once in ``create_app`` and stored
on ``app.state``; handlers receive them through these dependencies so
tests can build an app with their own configuration.
"""

from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates

from scratch_auth_demo.core.config import Settings
from scratch_auth_demo.core.session_token import TokenCodec

PACKAGE_DIR = Path(__file__).resolve().parent.parent

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


def get_settings(request: Request) -> Settings:
    """Application settings for the running app."""
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    """Session token codec for the running app."""
    return request.app.state.token_codec


def get_auth_redirect_url(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Build this service's own ``/auth`` URL.

    Uses PUBLIC_URL when configured, otherwise the request's scheme and host.
    """
    base = settings.public_url or str(request.base_url)
    return f"{base.rstrip('/')}/auth"


AppSettings = Annotated[Settings, Depends(get_settings)]
SessionCodec = Annotated[TokenCodec, Depends(get_token_codec)]
AuthRedirectUrl = Annotated[str, Depends(get_auth_redirect_url)]
