"""Exceptions for the authentication API.

Every exception carries a stable ``kind`` so callers can branch on the
failure category instead of catching generically.
"""


class AuthError(Exception):
    """Base exception for authentication errors."""

    kind = "unknown"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidCredentialsError(AuthError):
    """Login was rejected by the server."""

    kind = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials", status_code: int | None = None):
        super().__init__(message, status_code)


class RegistrationFailedError(AuthError):
    """The account could not be created (duplicate username, weak password...)."""

    kind = "registration_failed"

    def __init__(self, reason: str = "Registration failed", status_code: int | None = None):
        super().__init__(reason, status_code)
        self.reason = reason


class RefreshRejectedError(AuthError):
    """Refresh token is invalid or expired."""

    kind = "refresh_rejected"

    def __init__(self, message: str = "Refresh token rejected", status_code: int | None = None):
        super().__init__(message, status_code)


class UnauthorizedError(AuthError):
    """Access token was rejected outside the retry path."""

    kind = "unauthorized"

    def __init__(self, message: str = "Access token rejected", status_code: int | None = 401):
        super().__init__(message, status_code)


class NetworkError(AuthError):
    """Transport failure, not based on an HTTP status."""

    kind = "network_error"


class NotAuthenticatedError(AuthError):
    """User is not authenticated."""

    kind = "auth_required"

    def __init__(self, path: str | None = None):
        msg = "Not authenticated"
        if path:
            msg += f" for '{path}'"
        msg += ". Run 'sessionkit login' first."
        super().__init__(msg)
        self.path = path
