"""Application error classes.

Errors raised here propagate to the exception handlers registered in
``scratch_auth_demo.main``, which turn them into opaque plain-text
responses. Benign outcomes (invalid session token, rejected code) are
not errors and never reach this module.
"""


class AppError(Exception):
    """Base class for application errors.

    Attributes:
        code: Machine-readable error code (e.g., "VERIFIER_UNAVAILABLE").
        message: Human-readable message, safe to show to clients.
        status_code: HTTP status code to return.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class VerifierUnavailableError(AppError):
    """Identity Verifier could not be reached or failed server-side (502).

    Raised on transport errors, timeouts, and 5xx responses. A verifier
    that answers but rejects the code is a normal failure outcome instead.
    """

    def __init__(self, message: str = "Identity verifier unavailable") -> None:
        super().__init__(
            code="VERIFIER_UNAVAILABLE",
            message=message,
            status_code=502,
        )


class ConfigurationError(AppError):
    """Server is misconfigured (500).

    Raised at call time when the signing secret is missing.
    """

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=message,
            status_code=500,
        )
