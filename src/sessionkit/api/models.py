"""Data models for the authentication API."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionKitModel(BaseModel):
    """Base model with common configuration.

    All API models should inherit from this class to get:
    - populate_by_name: Allow both alias and field name in input
    - extra="ignore": Ignore unknown fields from API responses
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


@dataclass(frozen=True)
class TokenPair:
    """Access/refresh token pair, the only persisted session evidence."""

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        return "TokenPair(access_token=***, refresh_token=***)"


class Credentials(SessionKitModel):
    """Username/password pair. Never persisted."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128, repr=False)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


class User(SessionKitModel):
    """User as returned by the server."""

    id: str
    username: str
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Servers may send numeric ids."""
        if isinstance(v, int):
            return str(v)
        return v


class LoginResponse(SessionKitModel):
    """Body of POST /login: a single token."""

    token: str


class TokenPairResponse(SessionKitModel):
    """Body of POST /auth/refresh."""

    access_token: str
    refresh_token: str

    def to_token_pair(self) -> TokenPair:
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)


class AuthResponse(TokenPairResponse):
    """Body of POST /auth/register."""

    user: User


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login or registration."""

    tokens: TokenPair
    user: User
