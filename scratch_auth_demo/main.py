"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Security headers middleware
- Exception handlers (application errors, rate limiting, catch-all)
- Page and auth routers
- Health check endpoint
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from scratch_auth_demo.api.router import router
from scratch_auth_demo.core.config import Settings, settings
from scratch_auth_demo.core.errors import AppError
from scratch_auth_demo.core.rate_limiting import (
    configure_limiter,
    limiter,
    rate_limit_exceeded_handler,
)
from scratch_auth_demo.core.session_token import TokenCodec

logger = structlog.get_logger()

# Paths whose responses carry or clear the session token
_NO_STORE_PATHS = ("/auth", "/logout")


def apply_security_headers(response: Response, path: str, environment: str) -> None:
    """Set the security headers on a response.

    Headers added:
    - X-Frame-Options: Prevents clickjacking attacks
    - X-Content-Type-Options: Prevents MIME sniffing
    - Referrer-Policy: Controls referrer information leakage
    - Cache-Control: no-store on auth responses (they show the token)
    - Content-Security-Policy: Views are static HTML with inline styles only
    - Strict-Transport-Security: Forces HTTPS (production only)
    """
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if path in _NO_STORE_PATHS:
        response.headers["Cache-Control"] = "no-store, max-age=0"

    response.headers["Content-Security-Policy"] = (
        "default-src 'none'; img-src 'self'; style-src 'unsafe-inline'; "
        "frame-ancestors 'none'"
    )

    # HSTS only in production (assumes HTTPS via reverse proxy)
    if environment == "production":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(self, app: ASGIApp, *, environment: str) -> None:
        super().__init__(app)
        self._environment = environment

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Add security headers to response."""
        response = await call_next(request)
        apply_security_headers(response, request.url.path, self._environment)
        return response


def app_error_handler(_request: Request, exc: AppError) -> PlainTextResponse:
    """Handle application errors with their safe message and status.

    Args:
        request: The incoming request.
        exc: The AppError that was raised.

    Returns:
        Plain-text response with the error's status code.
    """
    if exc.status_code >= 500:
        logger.error("Application error", code=exc.code, status=exc.status_code)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def internal_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Catch-all for unhandled exceptions.

    Never expose internal error details to clients. Log for debugging.
    Runs outside the middleware stack, so security headers are set here.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        Generic 500 response.
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))
    response = PlainTextResponse("Internal server error", status_code=500)
    apply_security_headers(
        response, request.url.path, request.app.state.settings.environment
    )
    return response


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use. Defaults to the environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    config = app_settings or settings

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "server_started",
            host=config.api_host,
            port=config.api_port,
            environment=config.environment,
        )
        yield

    app = FastAPI(
        title=config.app_name,
        version="1.0.0",
        description="Sign in with Scratch Auth and keep the session in a JWT cookie",
        lifespan=lifespan,
    )

    # Built once, read-only for the lifetime of the process
    app.state.settings = config
    app.state.token_codec = TokenCodec(
        secret=config.auth_secret.get_secret_value(),
        ttl=timedelta(days=config.session_ttl_days),
    )

    app.add_middleware(SecurityHeadersMiddleware, environment=config.environment)

    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    configure_limiter(config)
    app.state.limiter = limiter

    app.include_router(router)

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Create the application instance
# Used by uvicorn: uvicorn scratch_auth_demo.main:app
app = create_app()
