"""Session token codec: signing and verification of session JWTs.

A session token is an HS256 JWT carrying the verified username in the
``name`` claim plus ``iat``/``exp``. It is integrity-protected, not
encrypted: clients can read the claims but cannot forge them.

Verification never raises. It returns a tagged result so callers treat
every failure (missing, malformed, bad signature, expired) as the same
"not authenticated" state:

    result = codec.verify(token)
    if isinstance(result, ValidSession):
        ...
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from scratch_auth_demo.core.errors import ConfigurationError

_ALGORITHM = "HS256"

# Default session lifetime: 7 days
SESSION_TTL = timedelta(days=7)


@dataclass(frozen=True)
class SessionClaims:
    """Decoded session token claims.

    Attributes:
        name: Verified username.
        issued_at: Token issuance time (UTC).
        expires_at: Token expiry time (UTC).
    """

    name: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class ValidSession:
    """Token verified: signature matches and it has not expired."""

    claims: SessionClaims
    token: str


@dataclass(frozen=True)
class InvalidSession:
    """Token absent or rejected. ``reason`` is for debugging only."""

    reason: str


SessionVerification = ValidSession | InvalidSession


class TokenCodec:
    """Signs and verifies session tokens with a server-held secret.

    Stateless and immutable after construction; one instance is shared by
    all requests.
    """

    def __init__(self, *, secret: str, ttl: timedelta = SESSION_TTL) -> None:
        self._secret = secret
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, name: str, *, now: datetime | None = None) -> str:
        """Create a signed session token for a verified username.

        Args:
            name: Username to store in the ``name`` claim.
            now: Issuance time. Defaults to the current UTC time.

        Returns:
            Encoded JWT string.

        Raises:
            ConfigurationError: If no signing secret is configured.
        """
        if not self._secret:
            raise ConfigurationError()

        issued_at = now or datetime.now(UTC)
        payload = {
            "name": name,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str | None) -> SessionVerification:
        """Verify a presented session token.

        Args:
            token: Raw token string from the cookie, or None.

        Returns:
            ValidSession with the decoded claims, or InvalidSession.
        """
        if not token:
            return InvalidSession("missing")
        if not self._secret:
            return InvalidSession("no secret configured")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            return InvalidSession("expired")
        except jwt.InvalidTokenError:
            return InvalidSession("invalid")

        name = payload.get("name")
        if not isinstance(name, str) or not name:
            return InvalidSession("missing name claim")

        claims = SessionClaims(
            name=name,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
        return ValidSession(claims=claims, token=token)
