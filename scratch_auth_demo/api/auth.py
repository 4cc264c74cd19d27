"""Authentication endpoints.

GET /auth runs the auth flow and renders its outcome; GET /logout clears
the session cookie. Both read the session from the ``jwt`` cookie.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import RedirectResponse
from starlette.responses import Response

from scratch_auth_demo.api.deps import (
    AppSettings,
    AuthRedirectUrl,
    SessionCodec,
    templates,
)
from scratch_auth_demo.core.auth import clear_session_cookie, set_session_cookie
from scratch_auth_demo.core.rate_limiting import auth_rate_limit, limiter
from scratch_auth_demo.services.auth_flow import (
    Authenticated,
    NeedsRedirect,
    VerifiedSuccess,
    run_auth_flow,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ===================================================================
# GET /auth
# ===================================================================


@router.get("/auth")
@limiter.limit(auth_rate_limit)
async def auth(
    request: Request,
    settings: AppSettings,
    codec: SessionCodec,
    redirect_url: AuthRedirectUrl,
    private_code: Annotated[str | None, Query(alias="privateCode")] = None,
) -> Response:
    """Show the signed-in user, verify a returned code, or start sign-in.

    Rate limit: RATE_LIMIT_AUTH per IP.
    """
    outcome = await run_auth_flow(
        session_token=request.cookies.get(settings.auth_cookie_name),
        private_code=private_code,
        redirect_url=redirect_url,
        codec=codec,
        settings=settings,
    )

    if isinstance(outcome, Authenticated):
        return templates.TemplateResponse(
            request,
            "authenticated.html",
            {"name": outcome.name, "token": outcome.token},
        )

    if isinstance(outcome, NeedsRedirect):
        return RedirectResponse(url=outcome.location, status_code=302)

    if isinstance(outcome, VerifiedSuccess):
        logger.info("Session issued", extra={"username": outcome.name})
        response = templates.TemplateResponse(
            request,
            "auth_success.html",
            {"name": outcome.name},
        )
        set_session_cookie(response, outcome.token, settings)
        return response

    return templates.TemplateResponse(request, "auth_failed.html", {})


# ===================================================================
# GET /logout
# ===================================================================


@router.get("/logout")
async def logout(settings: AppSettings) -> Response:
    """Clear the session cookie and go back to the index page.

    The token itself stays valid until it expires; only the client's copy
    is removed.
    """
    redirect = RedirectResponse(url="/", status_code=302)
    clear_session_cookie(redirect, settings)
    return redirect
