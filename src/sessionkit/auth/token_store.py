"""Token storage using keyring for secure storage."""

import logging
from typing import Protocol

import keyring
import keyring.errors

from sessionkit.api.models import TokenPair
from sessionkit.config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class TokenStore(Protocol):
    """Key-value persistence for the token pair.

    Operations are synchronous, idempotent and never raise.
    """

    def get(self) -> TokenPair | None: ...

    def set(self, tokens: TokenPair) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """In-process token store, used in tests and keyring-less environments."""

    def __init__(self, tokens: TokenPair | None = None):
        self._data: dict[str, str] = {}
        if tokens is not None:
            self.set(tokens)

    def get(self) -> TokenPair | None:
        access_token = self._data.get(ACCESS_TOKEN_KEY)
        refresh_token = self._data.get(REFRESH_TOKEN_KEY)
        if not access_token or not refresh_token:
            return None
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def set(self, tokens: TokenPair) -> None:
        self._data[ACCESS_TOKEN_KEY] = tokens.access_token
        self._data[REFRESH_TOKEN_KEY] = tokens.refresh_token

    def clear(self) -> None:
        self._data.clear()


class KeyringTokenStore:
    """Stores the token pair in the OS keyring.

    Each token lives under its own key (``access_token``, ``refresh_token``)
    of the configured keyring service. Backend failures are logged and never
    propagate: an unreadable keyring behaves like an empty one.
    """

    def __init__(self, service: str | None = None):
        self.settings = get_settings()
        self._service = service

    @property
    def service(self) -> str:
        """Get the keyring service name."""
        return self._service or self.settings.keyring_service

    def get(self) -> TokenPair | None:
        """Retrieve the stored pair, or None if either half is missing."""
        try:
            access_token = keyring.get_password(self.service, ACCESS_TOKEN_KEY)
            refresh_token = keyring.get_password(self.service, REFRESH_TOKEN_KEY)
        except keyring.errors.KeyringError as e:
            logger.warning(f"Could not read tokens from keyring: {e}")
            return None
        if not access_token or not refresh_token:
            return None
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def set(self, tokens: TokenPair) -> None:
        """Save both tokens."""
        try:
            keyring.set_password(self.service, ACCESS_TOKEN_KEY, tokens.access_token)
            keyring.set_password(self.service, REFRESH_TOKEN_KEY, tokens.refresh_token)
        except keyring.errors.KeyringError as e:
            logger.warning(f"Could not save tokens to keyring: {e}")

    def clear(self) -> None:
        """Delete both tokens; missing keys are ignored."""
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY):
            try:
                keyring.delete_password(self.service, key)
            except keyring.errors.PasswordDeleteError:
                pass
            except keyring.errors.KeyringError as e:
                logger.warning(f"Could not delete {key} from keyring: {e}")


def get_token_store(service: str | None = None) -> TokenStore:
    """Get the token store selected by the settings."""
    if not get_settings().use_keyring:
        return MemoryTokenStore()
    return KeyringTokenStore(service)
