"""Tests for the auth flow state machine.

The Identity Verifier is patched at the service's import site.
"""

import base64
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlsplit

import pytest

from scratch_auth_demo.core.errors import VerifierUnavailableError
from scratch_auth_demo.core.identity_verifier import VerificationResult
from scratch_auth_demo.core.session_token import TokenCodec, ValidSession
from scratch_auth_demo.services.auth_flow import (
    Authenticated,
    NeedsRedirect,
    VerifiedFailure,
    VerifiedSuccess,
    run_auth_flow,
)
from tests.conftest import TEST_AUTH_SECRET, TEST_VERIFIER_URL, create_test_jwt

_PATCH_VERIFY = "scratch_auth_demo.services.auth_flow.verify_private_code"
_REDIRECT_URL = "https://demo.test/auth"


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(secret=TEST_AUTH_SECRET)


async def _run(codec, test_settings, *, session_token=None, private_code=None):
    return await run_auth_flow(
        session_token=session_token,
        private_code=private_code,
        redirect_url=_REDIRECT_URL,
        codec=codec,
        settings=test_settings,
    )


class TestCheckingSession:
    """A valid cookie short-circuits the flow."""

    async def test_valid_token_is_authenticated(self, codec, test_settings):
        """Valid token → Authenticated with the claimed name and raw token."""
        token = codec.issue("alice")
        outcome = await _run(codec, test_settings, session_token=token)
        assert outcome == Authenticated(name="alice", token=token)

    async def test_valid_token_ignores_code(self, codec, test_settings):
        """With a valid session the verifier is never called."""
        token = codec.issue("alice")
        with patch(_PATCH_VERIFY, new_callable=AsyncMock) as mock_verify:
            outcome = await _run(
                codec, test_settings, session_token=token, private_code="abc123"
            )
        assert isinstance(outcome, Authenticated)
        mock_verify.assert_not_called()

    @pytest.mark.parametrize(
        "token",
        [
            "garbage",
            create_test_jwt(secret="wrong-secret-that-is-at-least-32-chars"),
            create_test_jwt(
                iat=datetime.now(UTC) - timedelta(days=8),
                expires_delta=timedelta(days=7),
            ),
        ],
        ids=["malformed", "bad-signature", "expired"],
    )
    async def test_invalid_token_falls_through_to_redirect(
        self, codec, test_settings, token
    ):
        """Every invalid token behaves like no token at all."""
        outcome = await _run(codec, test_settings, session_token=token)
        assert isinstance(outcome, NeedsRedirect)


class TestNeedsRedirect:
    """No session and no code → redirect to the verifier."""

    async def test_redirect_targets_verifier(self, codec, test_settings):
        """Location is the verifier's /auth/ page."""
        outcome = await _run(codec, test_settings)
        assert isinstance(outcome, NeedsRedirect)
        assert outcome.location.startswith(f"{TEST_VERIFIER_URL}/auth/?")

    async def test_redirect_param_is_own_auth_url(self, codec, test_settings):
        """redirect decodes to exactly the given /auth URL."""
        outcome = await _run(codec, test_settings)
        query = parse_qs(urlsplit(outcome.location).query)
        assert base64.b64decode(query["redirect"][0]).decode() == _REDIRECT_URL
        assert query["name"] == [test_settings.app_name]

    async def test_empty_code_is_treated_as_absent(self, codec, test_settings):
        """privateCode= (empty) does not call the verifier."""
        with patch(_PATCH_VERIFY, new_callable=AsyncMock) as mock_verify:
            outcome = await _run(codec, test_settings, private_code="")
        assert isinstance(outcome, NeedsRedirect)
        mock_verify.assert_not_called()


class TestVerifyingCode:
    """A code is exchanged with the Identity Verifier."""

    async def test_confirmed_code_issues_token(self, codec, test_settings):
        """Confirmed code → VerifiedSuccess with a token for that user."""
        with patch(
            _PATCH_VERIFY,
            new_callable=AsyncMock,
            return_value=VerificationResult(valid=True, username="alice"),
        ):
            outcome = await _run(codec, test_settings, private_code="abc123")

        assert isinstance(outcome, VerifiedSuccess)
        assert outcome.name == "alice"
        session = codec.verify(outcome.token)
        assert isinstance(session, ValidSession)
        assert session.claims.name == "alice"

    async def test_passes_code_and_settings_to_verifier(self, codec, test_settings):
        """The verifier receives the code, base URL and timeout."""
        with patch(
            _PATCH_VERIFY,
            new_callable=AsyncMock,
            return_value=VerificationResult(valid=False),
        ) as mock_verify:
            await _run(codec, test_settings, private_code="abc123")

        mock_verify.assert_awaited_once_with(
            private_code="abc123",
            verifier_url=test_settings.verifier_url,
            timeout=test_settings.verifier_timeout,
        )

    async def test_rejected_code_is_failure(self, codec, test_settings):
        """Rejected code → VerifiedFailure."""
        with patch(
            _PATCH_VERIFY,
            new_callable=AsyncMock,
            return_value=VerificationResult(valid=False),
        ):
            outcome = await _run(codec, test_settings, private_code="bad")
        assert outcome == VerifiedFailure()

    async def test_verifier_unavailable_propagates(self, codec, test_settings):
        """Unavailability is not turned into a failure view."""
        with (
            patch(
                _PATCH_VERIFY,
                new_callable=AsyncMock,
                side_effect=VerifierUnavailableError(),
            ),
            pytest.raises(VerifierUnavailableError),
        ):
            await _run(codec, test_settings, private_code="abc123")
