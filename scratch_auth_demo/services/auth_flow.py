"""Auth flow: decide the outcome of a request to ``/auth``.

Per-request state machine, nothing persisted:

1. Session cookie verifies → Authenticated
2. No valid session, no ``privateCode`` → NeedsRedirect (to the verifier)
3. ``privateCode`` present → ask the Identity Verifier:
   - confirmed → VerifiedSuccess (a new session token is minted)
   - rejected → VerifiedFailure

The route layer turns each outcome into a response. Only verifier
unavailability escapes as an exception (VerifierUnavailableError).
"""

from dataclasses import dataclass

from scratch_auth_demo.core.config import Settings
from scratch_auth_demo.core.identity_verifier import (
    build_authorization_url,
    verify_private_code,
)
from scratch_auth_demo.core.session_token import TokenCodec, ValidSession

# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True)
class Authenticated:
    """Existing session token is valid."""

    name: str
    token: str


@dataclass(frozen=True)
class NeedsRedirect:
    """No session and no code: send the user to the verifier."""

    location: str


@dataclass(frozen=True)
class VerifiedSuccess:
    """Code confirmed; ``token`` is the freshly issued session token."""

    name: str
    token: str


@dataclass(frozen=True)
class VerifiedFailure:
    """Code rejected; the user has to start over."""


AuthOutcome = Authenticated | NeedsRedirect | VerifiedSuccess | VerifiedFailure


# =============================================================================
# Flow
# =============================================================================


async def run_auth_flow(
    *,
    session_token: str | None,
    private_code: str | None,
    redirect_url: str,
    codec: TokenCodec,
    settings: Settings,
) -> AuthOutcome:
    """Run the authentication state machine for one request.

    Args:
        session_token: Value of the session cookie, if any.
        private_code: Value of the ``privateCode`` query parameter, if any.
        redirect_url: This service's own ``/auth`` URL.
        codec: Session token codec.
        settings: Application settings (verifier URL, timeout, app name).

    Returns:
        One of Authenticated, NeedsRedirect, VerifiedSuccess, VerifiedFailure.

    Raises:
        VerifierUnavailableError: If the verifier cannot be reached.
    """
    session = codec.verify(session_token)
    if isinstance(session, ValidSession):
        return Authenticated(name=session.claims.name, token=session.token)

    if not private_code:
        location = build_authorization_url(
            verifier_url=settings.verifier_url,
            redirect_url=redirect_url,
            app_name=settings.app_name,
        )
        return NeedsRedirect(location=location)

    result = await verify_private_code(
        private_code=private_code,
        verifier_url=settings.verifier_url,
        timeout=settings.verifier_timeout,
    )
    if not result.valid or not result.username:
        return VerifiedFailure()

    token = codec.issue(result.username)
    return VerifiedSuccess(name=result.username, token=token)
