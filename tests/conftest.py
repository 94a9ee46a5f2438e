"""Shared fixtures: an in-process fake of the authentication server."""

import asyncio
import base64
import json
from collections import Counter

import httpx
import pytest

from sessionkit.config import reset_settings


class FakeAuthServer:
    """Implements the server side of the auth contract for httpx.MockTransport.

    One account ``admin``/``secret`` exists. POST /login issues a single
    token (``login_token``) used for both roles, like the real server.
    """

    def __init__(self, login_token: str = "T"):
        self.login_token = login_token
        self.passwords = {"admin": "secret"}
        self.user_ids = {"admin": "1"}
        self.access_tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.calls: Counter[str] = Counter()
        self.logout_fails = False
        # When set, GET /users/me waits for it
        self.user_gate: asyncio.Event | None = None
        # When set, POST /auth/refresh issues new tokens then waits for it
        self.refresh_gate: asyncio.Event | None = None
        self._counter = 0

    def issue(self, username: str) -> tuple[str, str]:
        self._counter += 1
        access, refresh = f"A{self._counter}", f"R{self._counter}"
        self.access_tokens[access] = username
        self.refresh_tokens[refresh] = username
        return access, refresh

    def expire_access(self, token: str) -> None:
        self.access_tokens.pop(token, None)

    def revoke(self, token: str) -> None:
        self.access_tokens.pop(token, None)
        self.refresh_tokens.pop(token, None)

    def _user(self, username: str) -> dict:
        return {
            "id": self.user_ids[username],
            "username": username,
            "created_at": "2025-01-01T12:00:00Z",
        }

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls[path] += 1

        if path == "/login" and request.method == "POST":
            scheme, _, encoded = request.headers.get("Authorization", "").partition(" ")
            if scheme != "Basic":
                return httpx.Response(401)
            username, _, password = base64.b64decode(encoded).decode().partition(":")
            if self.passwords.get(username) != password:
                return httpx.Response(401)
            self.access_tokens[self.login_token] = username
            self.refresh_tokens[self.login_token] = username
            return httpx.Response(200, json={"token": self.login_token})

        if path == "/auth/register":
            body = json.loads(request.content)
            if body["username"] in self.passwords:
                return httpx.Response(409, json={"error": "username already exists"})
            self.passwords[body["username"]] = body["password"]
            self.user_ids[body["username"]] = str(len(self.user_ids) + 1)
            access, refresh = self.issue(body["username"])
            return httpx.Response(
                201,
                json={
                    "access_token": access,
                    "refresh_token": refresh,
                    "user": self._user(body["username"]),
                },
            )

        if path == "/auth/refresh":
            token = json.loads(request.content).get("refresh_token")
            username = self.refresh_tokens.pop(token, None)
            if username is None:
                return httpx.Response(401, json={"error": "invalid refresh token"})
            self.access_tokens.pop(token, None)
            access, refresh = self.issue(username)
            if self.refresh_gate is not None:
                await self.refresh_gate.wait()
            return httpx.Response(200, json={"access_token": access, "refresh_token": refresh})

        if path == "/auth/logout":
            if self.logout_fails:
                raise httpx.ConnectError("connection refused", request=request)
            self.refresh_tokens.pop(json.loads(request.content).get("refresh_token"), None)
            return httpx.Response(200, json={"message": "logged out"})

        # Everything else is a protected resource
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        username = self.access_tokens.get(token) if scheme == "Bearer" else None
        if username is None:
            return httpx.Response(401, json={"message": "unauthorized"})

        if path == "/users/me":
            if self.user_gate is not None:
                await self.user_gate.wait()
            return httpx.Response(200, json=self._user(username))

        return httpx.Response(200, json={"data": "resource data", "user": username})


@pytest.fixture
def auth_server() -> FakeAuthServer:
    return FakeAuthServer()


@pytest.fixture
def http_client(auth_server: FakeAuthServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://test", transport=httpx.MockTransport(auth_server))


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep tests away from the real config file and keyring."""
    monkeypatch.setattr("sessionkit.config.CONFIG_PATH", tmp_path / "config.yaml")
    monkeypatch.setenv("SESSIONKIT_USE_KEYRING", "false")
    reset_settings()
    yield
    reset_settings()
