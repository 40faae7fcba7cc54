"""Exception hierarchy shared by the gateway core.

Each error class carries the HTTP status and machine-readable error code it
is rendered with, so routers and stores raise domain errors and the
application's exception handlers translate them into responses.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    status_code: int = 500
    error_code: str = "internal_server_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(GatewayError):
    """Raised when request input is missing or malformed."""

    status_code = 400
    error_code = "validation_error"


class DuplicateResourceError(GatewayError):
    """Raised when a uniquely named resource already exists."""

    status_code = 400
    error_code = "duplicate_resource"


class DuplicateUsernameError(DuplicateResourceError):
    """Raised when a username is already taken."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Username already exists")


class DuplicateEmailError(DuplicateResourceError):
    """Raised when an email address is already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("Email already exists")


class DuplicateServiceNameError(DuplicateResourceError):
    """Raised when a service name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("Service name already exists")


class AuthenticationError(GatewayError):
    """Raised when credentials or tokens are missing, invalid or expired."""

    status_code = 401
    error_code = "authentication_failed"

    def __init__(self, message: str, reason: str = "invalid_credentials") -> None:
        self.reason = reason
        super().__init__(message)


class AuthorizationError(GatewayError):
    """Raised when an authenticated caller lacks the required role."""

    status_code = 403
    error_code = "forbidden"


class NotFoundError(GatewayError):
    """Raised when a resource does not exist or is not visible to the caller."""

    status_code = 404
    error_code = "not_found"


class RateLimitExceededError(GatewayError):
    """Raised when an API key has used up its request allowance."""

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, limit: int, window_seconds: int, retry_after: Optional[int] = None) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.retry_after = retry_after if retry_after and retry_after > 0 else window_seconds
        super().__init__(
            f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds."
        )


class InternalError(GatewayError):
    """Raised when a persistence operation fails unexpectedly."""

    status_code = 500
    error_code = "internal_server_error"
