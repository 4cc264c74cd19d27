"""Identity Verifier client: authorization redirect and code verification.

The verifier (Scratch Auth) authenticates the user out-of-band, then sends
them back to our ``/auth`` endpoint with a one-time ``privateCode``. We
exchange that code for the verified username.

Response handling:
- 2xx with ``{"valid": true, "username": "..."}`` → valid result
- 2xx with ``{"valid": false}`` → invalid result
- 2xx with a malformed body, or any 4xx → invalid result
- redirects are followed; the final response is classified as above
- transport error, timeout, or 5xx → VerifierUnavailableError
"""

import base64
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from scratch_auth_demo.core.errors import VerifierUnavailableError

logger = logging.getLogger(__name__)

_AUTHORIZE_PATH = "/auth/"
_VERIFY_PATH = "/api/auth/verifyToken"


class VerifyTokenResponse(BaseModel):
    """Expected JSON body of the verifyToken endpoint."""

    valid: bool
    username: str | None = None


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of exchanging a one-time code.

    Attributes:
        valid: Whether the verifier confirmed the code.
        username: Verified username (set only when valid).
    """

    valid: bool
    username: str | None = None


_INVALID = VerificationResult(valid=False)


def encode_redirect(url: str) -> str:
    """Base64-encode the redirect-back URL as the verifier expects."""
    return base64.b64encode(url.encode("utf-8")).decode("ascii")


def build_authorization_url(
    *,
    verifier_url: str,
    redirect_url: str,
    app_name: str,
) -> str:
    """Build the verifier's authorization URL.

    Args:
        verifier_url: Base URL of the Identity Verifier.
        redirect_url: This service's own ``/auth`` URL.
        app_name: Display name shown to the user by the verifier.

    Returns:
        Absolute URL to redirect the user to.
    """
    params = {
        "redirect": encode_redirect(redirect_url),
        "name": app_name,
    }
    return f"{verifier_url.rstrip('/')}{_AUTHORIZE_PATH}?{urlencode(params)}"


def _parse_verification(resp: httpx.Response) -> VerificationResult:
    """Validate the verifier's response shape; malformed means invalid."""
    try:
        body = VerifyTokenResponse.model_validate_json(resp.content)
    except ValidationError:
        logger.warning("Malformed verifier response", extra={"status": resp.status_code})
        return _INVALID

    if not body.valid:
        return _INVALID

    if not (body.username or "").strip():
        logger.warning("Verifier reported valid code without username")
        return _INVALID

    return VerificationResult(valid=True, username=body.username)


async def verify_private_code(
    *,
    private_code: str,
    verifier_url: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> VerificationResult:
    """Exchange a one-time code for a verified identity.

    Args:
        private_code: Code received on the ``privateCode`` query parameter.
        verifier_url: Base URL of the Identity Verifier.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests).

    Returns:
        VerificationResult, invalid for rejected codes or malformed responses.

    Raises:
        VerifierUnavailableError: On transport errors, redirect loops,
            timeouts, or 5xx.
    """
    url = f"{verifier_url.rstrip('/')}{_VERIFY_PATH}"

    try:
        async with httpx.AsyncClient(
            transport=transport, follow_redirects=True
        ) as client:
            resp = await client.get(
                url,
                params={"privateCode": private_code},
                timeout=timeout,
            )
    except httpx.TimeoutException:
        logger.warning("Verifier request timed out", extra={"timeout": timeout})
        raise VerifierUnavailableError() from None
    except httpx.RequestError:
        logger.exception("Verifier request failed")
        raise VerifierUnavailableError() from None

    if resp.is_server_error:
        logger.warning("Verifier server error", extra={"status": resp.status_code})
        raise VerifierUnavailableError()

    if resp.is_client_error:
        return _INVALID

    return _parse_verification(resp)
