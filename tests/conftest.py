from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta

import jwt
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response
from pydantic import SecretStr

from scratch_auth_demo.core.config import Settings
from scratch_auth_demo.core.rate_limiting import (
    auth_rate_limit,
    configure_limiter,
    limiter,
)
from scratch_auth_demo.main import create_app

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105  # gitleaks:allow

TEST_BASE_URL = "https://demo.test"
TEST_VERIFIER_URL = "https://verifier.test"
TEST_APP_NAME = "Scratch Auth Demo"


def create_test_jwt(
    name: str = "alice",
    *,
    secret: str = TEST_AUTH_SECRET,
    expires_delta: timedelta | None = None,
    iat: datetime | None = None,
) -> str:
    """Create a signed session token for test authentication.

    Args:
        name: Username to encode in the name claim.
        secret: Signing secret (must match the app's secret in tests).
        expires_delta: Time until expiration. Defaults to 7 days.
        iat: Issued-at time. Defaults to now.

    Returns:
        Encoded JWT string.
    """
    issued_at = iat or datetime.now(UTC)
    payload = {
        "name": name,
        "iat": issued_at,
        "exp": issued_at + (expires_delta or timedelta(days=7)),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def get_set_cookie(response: Response, name: str) -> str | None:
    """Return the raw Set-Cookie header for ``name``, if present."""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{name}="):
            return header
    return None


def cookie_value(set_cookie: str) -> str:
    """Extract the value from a raw Set-Cookie header."""
    first = set_cookie.split(";", 1)[0]
    return first.split("=", 1)[1].strip('"')


@pytest.fixture(autouse=True)
def _reset_rate_limiting() -> Iterator[None]:
    """Start every test with empty limit counters; restore limiter config after."""
    original_enabled = limiter.enabled
    original_limit = auth_rate_limit()
    limiter.reset()
    yield
    configure_limiter(
        Settings(
            _env_file=None,
            rate_limit_enabled=original_enabled,
            rate_limit_auth=original_limit,
        )
    )
    limiter.reset()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for the test app (explicit secret and URLs, no .env).

    Rate limiting is off; tests that exercise it build their own settings.
    """
    return Settings(
        _env_file=None,
        auth_secret=SecretStr(TEST_AUTH_SECRET),
        verifier_url=TEST_VERIFIER_URL,
        app_name=TEST_APP_NAME,
        environment="test",
        rate_limit_enabled=False,
    )


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create test application instance."""
    return create_app(test_settings)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the test app (no redirects followed)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url=TEST_BASE_URL,
        follow_redirects=False,
    ) as ac:
        yield ac
