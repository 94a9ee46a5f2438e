"""Tests for the AuthGateway protocol client."""

import json

import httpx
import pytest
import respx

from sessionkit.api.exceptions import (
    InvalidCredentialsError,
    NetworkError,
    RefreshRejectedError,
    RegistrationFailedError,
    UnauthorizedError,
)
from sessionkit.api.gateway import AuthGateway
from sessionkit.api.models import Credentials, TokenPair


@pytest.fixture
def mock_api():
    with respx.mock(base_url="http://test", assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def gateway():
    return AuthGateway(httpx.AsyncClient(base_url="http://test"))


@pytest.fixture
def admin():
    return Credentials(username="admin", password="secret")


@pytest.mark.asyncio
class TestLogin:
    """Tests for POST /login."""

    async def test_login_uses_basic_auth(self, mock_api, gateway, admin):
        """Credentials go in a Basic Authorization header, not the body."""
        route = mock_api.post("/login").mock(
            return_value=httpx.Response(200, json={"token": "T"})
        )

        await gateway.login(admin)

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Basic YWRtaW46c2VjcmV0"
        assert request.content == b""

    async def test_login_single_token_fills_both_roles(self, mock_api, gateway, admin):
        """The one token the server returns is used as access and refresh token."""
        mock_api.post("/login").mock(return_value=httpx.Response(200, json={"token": "T"}))

        result = await gateway.login(admin)

        assert result.tokens == TokenPair(access_token="T", refresh_token="T")
        assert result.user.id == "1"
        assert result.user.username == "admin"

    async def test_login_rejected(self, mock_api, gateway):
        mock_api.post("/login").mock(return_value=httpx.Response(401))

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await gateway.login(Credentials(username="admin", password="wrong"))

        assert exc_info.value.status_code == 401
        assert exc_info.value.kind == "invalid_credentials"

    async def test_login_malformed_body(self, mock_api, gateway, admin):
        mock_api.post("/login").mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(InvalidCredentialsError):
            await gateway.login(admin)

    async def test_login_network_error(self, mock_api, gateway, admin):
        mock_api.post("/login").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError) as exc_info:
            await gateway.login(admin)

        assert exc_info.value.kind == "network_error"


@pytest.mark.asyncio
class TestRegister:
    """Tests for POST /auth/register."""

    async def test_register_success(self, mock_api, gateway):
        route = mock_api.post("/auth/register").mock(
            return_value=httpx.Response(
                201,
                json={
                    "access_token": "A1",
                    "refresh_token": "R1",
                    "user": {"id": 7, "username": "newuser", "created_at": "2025-01-01T12:00:00Z"},
                },
            )
        )

        result = await gateway.register(Credentials(username="newuser", password="Passw0rd!"))

        assert json.loads(route.calls.last.request.content) == {
            "username": "newuser",
            "password": "Passw0rd!",
        }
        assert "Authorization" not in route.calls.last.request.headers
        assert result.tokens == TokenPair("A1", "R1")
        assert result.user.id == "7"
        assert result.user.created_at.year == 2025

    async def test_register_duplicate_username(self, mock_api, gateway):
        """The server's error message becomes the failure reason."""
        mock_api.post("/auth/register").mock(
            return_value=httpx.Response(409, json={"error": "username already exists"})
        )

        with pytest.raises(RegistrationFailedError) as exc_info:
            await gateway.register(Credentials(username="admin", password="x"))

        assert exc_info.value.reason == "username already exists"
        assert exc_info.value.status_code == 409

    async def test_register_failure_without_body(self, mock_api, gateway):
        mock_api.post("/auth/register").mock(return_value=httpx.Response(500))

        with pytest.raises(RegistrationFailedError) as exc_info:
            await gateway.register(Credentials(username="admin", password="x"))

        assert exc_info.value.reason == "Registration failed"


@pytest.mark.asyncio
class TestRefresh:
    """Tests for POST /auth/refresh."""

    async def test_refresh_success(self, mock_api, gateway):
        route = mock_api.post("/auth/refresh").mock(
            return_value=httpx.Response(200, json={"access_token": "A2", "refresh_token": "R2"})
        )

        tokens = await gateway.refresh("R1")

        assert json.loads(route.calls.last.request.content) == {"refresh_token": "R1"}
        assert tokens == TokenPair("A2", "R2")

    async def test_refresh_rejected(self, mock_api, gateway):
        mock_api.post("/auth/refresh").mock(
            return_value=httpx.Response(401, json={"error": "invalid refresh token"})
        )

        with pytest.raises(RefreshRejectedError) as exc_info:
            await gateway.refresh("expired")

        assert str(exc_info.value) == "invalid refresh token"

    async def test_refresh_network_error(self, mock_api, gateway):
        mock_api.post("/auth/refresh").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(NetworkError):
            await gateway.refresh("R1")

    async def test_refresh_is_not_retried(self, mock_api, gateway):
        route = mock_api.post("/auth/refresh").mock(return_value=httpx.Response(503))

        with pytest.raises(RefreshRejectedError):
            await gateway.refresh("R1")

        assert route.call_count == 1


@pytest.mark.asyncio
class TestLogout:
    """Tests for POST /auth/logout."""

    async def test_logout_sends_refresh_token(self, mock_api, gateway):
        route = mock_api.post("/auth/logout").mock(return_value=httpx.Response(204))

        await gateway.logout("R1")

        assert json.loads(route.calls.last.request.content) == {"refresh_token": "R1"}

    async def test_logout_non_2xx(self, mock_api, gateway):
        mock_api.post("/auth/logout").mock(return_value=httpx.Response(400))

        with pytest.raises(RefreshRejectedError):
            await gateway.logout("R1")

    async def test_logout_network_error(self, mock_api, gateway):
        mock_api.post("/auth/logout").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError):
            await gateway.logout("R1")


@pytest.mark.asyncio
class TestCurrentUser:
    """Tests for GET /users/me."""

    async def test_current_user(self, mock_api, gateway):
        route = mock_api.get("/users/me").mock(
            return_value=httpx.Response(
                200, json={"id": "1", "username": "admin", "created_at": "2025-01-01T12:00:00Z"}
            )
        )

        user = await gateway.current_user("A1")

        assert route.calls.last.request.headers["Authorization"] == "Bearer A1"
        assert user.id == "1"
        assert user.username == "admin"

    async def test_current_user_unauthorized(self, mock_api, gateway):
        mock_api.get("/users/me").mock(return_value=httpx.Response(401))

        with pytest.raises(UnauthorizedError) as exc_info:
            await gateway.current_user("expired")

        assert exc_info.value.status_code == 401
        assert exc_info.value.kind == "unauthorized"

    async def test_current_user_server_error_maps_to_unauthorized(self, mock_api, gateway):
        mock_api.get("/users/me").mock(return_value=httpx.Response(500))

        with pytest.raises(UnauthorizedError) as exc_info:
            await gateway.current_user("A1")

        assert exc_info.value.status_code == 500

    async def test_current_user_network_error(self, mock_api, gateway):
        mock_api.get("/users/me").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError):
            await gateway.current_user("A1")
