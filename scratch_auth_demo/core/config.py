"""Application configuration loaded from environment variables.

Settings for the HTTP server, the Identity Verifier, and session cookies.
Uses pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Minimum length for AUTH_SECRET in production (256 bits = 32 bytes)
_MIN_AUTH_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Server
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 3000

    # Application
    app_name: str = "Scratch Auth Demo"
    environment: str = "development"
    log_level: str = "INFO"

    # Public base URL of this service, used to build the redirect-back URL.
    # Empty: derived from the incoming request.
    public_url: str = ""

    # Session token signing. SECRET is accepted for compatibility with
    # existing deployments of the demo.
    auth_secret: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("auth_secret", "AUTH_SECRET", "SECRET"),
    )
    auth_cookie_name: str = "jwt"
    auth_cookie_secure: bool = True
    auth_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    session_ttl_days: int = 7

    # Identity Verifier (Scratch Auth)
    verifier_url: str = "https://auth.itinerary.eu.org"
    verifier_timeout: float = 10.0

    # Rate Limiting
    # Format: "count/period" (e.g., "10/minute", "100/hour")
    rate_limit_auth: str = "30/minute"
    rate_limit_enabled: bool = True

    @property
    def session_max_age(self) -> int:
        """Cookie max-age in seconds."""
        return self.session_ttl_days * 24 * 3600

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate security requirements.

        Checks:
        - SameSite=None requires Secure flag (browser requirement)
        - Session lifetime must be positive
        - AUTH_SECRET must be set and >= 32 chars in production
        """
        if self.auth_cookie_samesite == "none" and not self.auth_cookie_secure:
            msg = (
                "AUTH_COOKIE_SECURE must be true when AUTH_COOKIE_SAMESITE=none. "
                "Browsers reject SameSite=None cookies without the Secure flag."
            )
            raise ValueError(msg)

        if self.session_ttl_days <= 0:
            msg = f"SESSION_TTL_DAYS must be positive. Got: {self.session_ttl_days}"
            raise ValueError(msg)

        if self.verifier_timeout <= 0:
            msg = f"VERIFIER_TIMEOUT must be positive. Got: {self.verifier_timeout}"
            raise ValueError(msg)

        if self.environment == "production":
            secret_value = self.auth_secret.get_secret_value()
            if not secret_value:
                msg = (
                    "AUTH_SECRET must be set in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)
            if len(secret_value) < _MIN_AUTH_SECRET_LENGTH:
                msg = (
                    f"AUTH_SECRET must be at least {_MIN_AUTH_SECRET_LENGTH} "
                    "characters for adequate security."
                )
                raise ValueError(msg)

        return self


settings = Settings()
