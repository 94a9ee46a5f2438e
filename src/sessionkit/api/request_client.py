"""HTTP client that injects bearer tokens and retries once after a refresh."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable

import httpx

from sessionkit.api.exceptions import NetworkError, RefreshRejectedError
from sessionkit.api.gateway import AuthGateway
from sessionkit.api.models import TokenPair

if TYPE_CHECKING:
    from sessionkit.auth.token_store import TokenStore

logger = logging.getLogger(__name__)


class AuthenticatedRequestClient:
    """Wraps requests with ``Authorization: Bearer`` and refresh-on-401.

    Per call there is at most one refresh and at most one retry. Concurrent
    calls that hit 401 together share a single in-flight refresh.

    Usage:
        client = AuthenticatedRequestClient(http, store, gateway)
        response = await client.get("/live-data")
    """

    def __init__(self, client: httpx.AsyncClient, store: "TokenStore", gateway: AuthGateway):
        """Initialize the request client.

        Args:
            client: HTTP client with ``base_url`` set
            store: Where the token pair lives
            gateway: Used for the refresh call
        """
        self._client = client
        self._store = store
        self._gateway = gateway
        self._refresh_task: asyncio.Task[TokenPair | None] | None = None
        self._expiry_listeners: list[Callable[[], None]] = []

    def on_session_expired(self, callback: Callable[[], None]) -> None:
        """Register a callback fired when a rejected refresh clears the store."""
        self._expiry_listeners.append(callback)

    @property
    def refresh_in_progress(self) -> bool:
        return self._refresh_task is not None

    async def _dispatch(
        self,
        method: str,
        url: str,
        tokens: TokenPair | None,
        headers: Any,
        kwargs: dict[str, Any],
    ) -> httpx.Response:
        request_headers = httpx.Headers(headers)
        if tokens is not None:
            request_headers["Authorization"] = f"Bearer {tokens.access_token}"
        try:
            return await self._client.request(method, url, headers=request_headers, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Network error during {method} {url}: {e}")
            raise NetworkError(f"Network error during {method} {url}: {e}") from e

    async def send(self, method: str, url: str, *, headers: Any = None, **kwargs: Any) -> httpx.Response:
        """Send a request with the stored access token.

        Returns the original 401 when there is no refresh token or the
        refresh fails; otherwise the response of the single retry, whatever
        its status.

        Raises:
            NetworkError: On transport failure of the request itself
        """
        tokens = self._store.get()
        response = await self._dispatch(method, url, tokens, headers, kwargs)
        if response.status_code != 401:
            return response

        current = self._store.get()
        if current is None:
            return response

        if tokens is None or current.access_token != tokens.access_token:
            # Tokens were stored or refreshed while this call was in flight
            new_tokens: TokenPair | None = current
        else:
            new_tokens = await self.refresh_tokens()
        if new_tokens is None:
            return response

        logger.debug(f"Retrying {method} {url} with refreshed token")
        return await self._dispatch(method, url, new_tokens, headers, kwargs)

    async def refresh_tokens(self) -> TokenPair | None:
        """Refresh the token pair, joining an in-flight refresh if there is one.

        The result is dropped if the stored pair changed while the refresh
        was running (logout, or a new login).

        Returns:
            The new pair, or None if there was nothing to refresh, the
            refresh failed, or the session changed meanwhile
        """
        if self._refresh_task is None:
            tokens = self._store.get()
            if tokens is None:
                return None
            # Claimed before the first await so concurrent callers join it
            self._refresh_task = asyncio.ensure_future(self._refresh(tokens))
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self, tokens: TokenPair) -> TokenPair | None:
        try:
            new_tokens = await self._gateway.refresh(tokens.refresh_token)
        except RefreshRejectedError:
            if self._store.get() != tokens:
                logger.debug("Session changed during refresh, ignoring rejection")
                return None
            logger.warning("Refresh token rejected, clearing stored tokens")
            self._store.clear()
            self._notify_expired()
            return None
        except NetworkError as e:
            logger.warning(f"Token refresh failed: {e}")
            return None
        else:
            if self._store.get() != tokens:
                logger.info("Session changed during refresh, discarding new tokens")
                return None
            self._store.set(new_tokens)
            logger.info("Access token refreshed")
            return new_tokens
        finally:
            self._refresh_task = None

    def _notify_expired(self) -> None:
        for callback in self._expiry_listeners:
            callback()

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for GET requests."""
        return await self.send("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for POST requests."""
        return await self.send("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for PUT requests."""
        return await self.send("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for DELETE requests."""
        return await self.send("DELETE", url, **kwargs)
