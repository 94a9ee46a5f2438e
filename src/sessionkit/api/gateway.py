"""Protocol client for the authentication endpoints."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from sessionkit.api.exceptions import (
    AuthError,
    InvalidCredentialsError,
    NetworkError,
    RefreshRejectedError,
    RegistrationFailedError,
    UnauthorizedError,
)
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

logger = logging.getLogger(__name__)

LOGIN_ENDPOINT = "/login"
REGISTER_ENDPOINT = "/auth/register"
REFRESH_ENDPOINT = "/auth/refresh"
LOGOUT_ENDPOINT = "/auth/logout"
CURRENT_USER_ENDPOINT = "/users/me"

# POST /login answers with a token only; the user is built from the
# submitted username with this id.
LOGIN_PLACEHOLDER_USER_ID = "1"

M = TypeVar("M", bound=SessionKitModel)


def _error_message(response: httpx.Response, default: str) -> str:
    """Extract the server's error message from a JSON body, if any."""
    try:
        data = response.json()
    except ValueError:
        return default
    if isinstance(data, dict):
        for key in ("error", "message"):
            if isinstance(data.get(key), str) and data[key]:
                return data[key]
    return default


def _parse(response: httpx.Response, model: type[M], error: AuthError) -> M:
    """Validate a 2xx body against ``model``, raising ``error`` on mismatch."""
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.error(f"Malformed response from {response.request.url.path}: {e}")
        raise error from e


class AuthGateway:
    """Stateless client for login, registration, refresh, logout and user lookup.

    Every non-2xx response maps to exactly one error kind per operation and
    transport failures map to NetworkError. Nothing is retried here.
    """

    def __init__(self, client: httpx.AsyncClient):
        """Initialize the gateway.

        Args:
            client: HTTP client with ``base_url`` pointing at the server
        """
        self._client = client

    async def _post(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self._dispatch("POST", endpoint, **kwargs)

    async def _dispatch(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, endpoint, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Network error during {method} {endpoint}: {e}")
            raise NetworkError(f"Network error during {method} {endpoint}: {e}") from e

    async def login(self, credentials: Credentials) -> AuthResult:
        """Log in with HTTP Basic credentials.

        The server issues a single token which serves as both the access
        and the refresh token.

        Raises:
            InvalidCredentialsError: If the server rejects the credentials
            NetworkError: On transport failure
        """
        response = await self._post(
            LOGIN_ENDPOINT,
            auth=httpx.BasicAuth(credentials.username, credentials.password),
        )
        if not response.is_success:
            raise InvalidCredentialsError(status_code=response.status_code)

        body = _parse(response, LoginResponse, InvalidCredentialsError("Malformed login response"))
        tokens = TokenPair(access_token=body.token, refresh_token=body.token)
        user = User(id=LOGIN_PLACEHOLDER_USER_ID, username=credentials.username)
        logger.info(f"Logged in as {credentials.username}")
        return AuthResult(tokens=tokens, user=user)

    async def register(self, credentials: Credentials) -> AuthResult:
        """Create an account and receive a token pair for it.

        Raises:
            RegistrationFailedError: If the account cannot be created
            NetworkError: On transport failure
        """
        response = await self._post(
            REGISTER_ENDPOINT,
            json={"username": credentials.username, "password": credentials.password},
        )
        if not response.is_success:
            reason = _error_message(response, "Registration failed")
            raise RegistrationFailedError(reason, status_code=response.status_code)

        body = _parse(
            response, AuthResponse, RegistrationFailedError("Malformed registration response")
        )
        logger.info(f"Registered {body.user.username}")
        return AuthResult(tokens=body.to_token_pair(), user=body.user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        Raises:
            RefreshRejectedError: If the refresh token is invalid or expired
            NetworkError: On transport failure
        """
        response = await self._post(REFRESH_ENDPOINT, json={"refresh_token": refresh_token})
        if not response.is_success:
            message = _error_message(response, "Refresh token rejected")
            logger.warning(f"Token refresh failed ({response.status_code}): {message}")
            raise RefreshRejectedError(message, status_code=response.status_code)

        body = _parse(response, TokenPairResponse, RefreshRejectedError("Malformed refresh response"))
        return body.to_token_pair()

    async def logout(self, refresh_token: str) -> None:
        """Revoke the refresh token server side. Response body is ignored.

        Raises:
            RefreshRejectedError: If the server refuses the token
            NetworkError: On transport failure
        """
        response = await self._post(LOGOUT_ENDPOINT, json={"refresh_token": refresh_token})
        if not response.is_success:
            raise RefreshRejectedError(
                f"Logout failed ({response.status_code})", status_code=response.status_code
            )

    async def current_user(self, access_token: str) -> User:
        """Look up the user the access token belongs to.

        Raises:
            UnauthorizedError: If the token is rejected
            NetworkError: On transport failure
        """
        response = await self._dispatch(
            "GET",
            CURRENT_USER_ENDPOINT,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not response.is_success:
            raise UnauthorizedError(
                f"User lookup failed ({response.status_code})", status_code=response.status_code
            )

        return _parse(response, User, UnauthorizedError("Malformed user response", None))
