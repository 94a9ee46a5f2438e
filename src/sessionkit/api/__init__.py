"""API module for sessionkit."""

from sessionkit.api.exceptions import (
    AuthError,
    InvalidCredentialsError,
    NetworkError,
    NotAuthenticatedError,
    RefreshRejectedError,
    RegistrationFailedError,
    UnauthorizedError,
)
from sessionkit.api.gateway import AuthGateway
from sessionkit.api.models import (
    AuthResponse,
    AuthResult,
    Credentials,
    LoginResponse,
    SessionKitModel,
    TokenPair,
    TokenPairResponse,
    User,
)
from sessionkit.api.request_client import AuthenticatedRequestClient

__all__ = [
    # Clients
    "AuthGateway",
    "AuthenticatedRequestClient",
    # Exceptions
    "AuthError",
    "InvalidCredentialsError",
    "RegistrationFailedError",
    "RefreshRejectedError",
    "UnauthorizedError",
    "NetworkError",
    "NotAuthenticatedError",
    # Base model
    "SessionKitModel",
    # Models
    "AuthResponse",
    "AuthResult",
    "Credentials",
    "LoginResponse",
    "TokenPair",
    "TokenPairResponse",
    "User",
]
