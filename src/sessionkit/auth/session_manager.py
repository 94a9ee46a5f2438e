"""Session state machine: restoration, login, registration and logout."""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from sessionkit.api.exceptions import AuthError, UnauthorizedError
from sessionkit.api.gateway import AuthGateway
from sessionkit.api.models import AuthResult, Credentials, TokenPair, User
from sessionkit.api.request_client import AuthenticatedRequestClient
from sessionkit.auth.token_store import TokenStore

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of the in-memory session."""

    UNINITIALIZED = "uninitialized"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionManager:
    """Owns the in-memory session (user, loading flag) and its transitions.

    Tokens are always written to the store before the session is published
    as authenticated, and logout clears the store even when the server
    cannot be reached.

    Usage:
        manager = SessionManager(store, gateway, request_client)
        await manager.initialize()
        if manager.state is SessionState.UNAUTHENTICATED:
            await manager.login(Credentials(username="admin", password="secret"))
    """

    def __init__(
        self,
        store: TokenStore,
        gateway: AuthGateway,
        client: AuthenticatedRequestClient,
    ):
        self._store = store
        self._gateway = gateway
        self._client = client
        self._state = SessionState.UNINITIALIZED
        self._user: User | None = None
        self._pending = 0
        self._restore_task: asyncio.Task[SessionState] | None = None
        # Bumped by login/register/logout so a late restoration is discarded
        self._epoch = 0
        client.on_session_expired(self._on_session_expired)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def loading(self) -> bool:
        """True while a restoration, login, registration or logout is running."""
        return self._pending > 0

    def current_user(self) -> User | None:
        return self._user

    def is_authenticated(self) -> bool:
        """Optimistic check: a token pair is stored.

        Does not wait for restoration and does not talk to the server; use
        ``state`` to know whether the tokens were actually accepted.
        """
        return self._store.get() is not None

    def _set_state(self, state: SessionState) -> None:
        if state is not self._state:
            logger.debug(f"Session state {self._state.value} -> {state.value}")
        self._state = state

    async def initialize(self) -> SessionState:
        """Restore the session from stored tokens, once.

        Concurrent callers share the in-flight restoration; later calls
        return the settled state without any network traffic.
        """
        if self._restore_task is not None:
            return await asyncio.shield(self._restore_task)
        if self._state is not SessionState.UNINITIALIZED:
            return self._state

        tokens = self._store.get()
        if tokens is None:
            self._set_state(SessionState.UNAUTHENTICATED)
            return self._state

        self._set_state(SessionState.RESTORING)
        self._pending += 1
        self._restore_task = asyncio.ensure_future(self._restore(tokens))
        return await asyncio.shield(self._restore_task)

    async def _restore(self, tokens: TokenPair) -> SessionState:
        epoch = self._epoch
        try:
            user = await self._fetch_user(tokens)
        except Exception:
            if epoch == self._epoch:
                logger.exception("Session restoration crashed, clearing stored tokens")
                self._store.clear()
                self._user = None
                self._set_state(SessionState.UNAUTHENTICATED)
            raise
        finally:
            self._pending -= 1
            self._restore_task = None

        if epoch != self._epoch:
            logger.debug("Session changed during restoration, discarding result")
            return self._state

        if user is None:
            self._store.clear()
            self._user = None
            self._set_state(SessionState.UNAUTHENTICATED)
        else:
            self._user = user
            self._set_state(SessionState.AUTHENTICATED)
            logger.info(f"Session restored for {user.username}")
        return self._state

    async def _fetch_user(self, tokens: TokenPair) -> User | None:
        """Look up the user, refreshing once if the access token is stale."""
        try:
            return await self._gateway.current_user(tokens.access_token)
        except UnauthorizedError:
            logger.debug("Stored access token rejected, trying refresh")
        except AuthError as e:
            logger.info(f"Session restoration failed: {e}")
            return None

        new_tokens = await self._client.refresh_tokens()
        if new_tokens is None:
            return None
        try:
            return await self._gateway.current_user(new_tokens.access_token)
        except AuthError as e:
            logger.info(f"Session restoration failed after refresh: {e}")
            return None

    async def login(self, credentials: Credentials) -> User:
        """Log in and publish the session.

        Raises:
            InvalidCredentialsError: If the server rejects the credentials
            NetworkError: On transport failure
        """
        return await self._authenticate(self._gateway.login, credentials)

    async def register(self, credentials: Credentials) -> User:
        """Create an account and publish the session.

        Raises:
            RegistrationFailedError: If the account cannot be created
            NetworkError: On transport failure
        """
        return await self._authenticate(self._gateway.register, credentials)

    async def _authenticate(
        self,
        operation: Callable[[Credentials], Awaitable[AuthResult]],
        credentials: Credentials,
    ) -> User:
        self._pending += 1
        try:
            result = await operation(credentials)
        finally:
            self._pending -= 1

        self._epoch += 1
        self._store.set(result.tokens)
        self._user = result.user
        self._set_state(SessionState.AUTHENTICATED)
        return result.user

    async def logout(self) -> None:
        """End the session. Always succeeds locally, never raises."""
        tokens = self._store.get()
        self._epoch += 1
        self._pending += 1
        try:
            if tokens is not None:
                try:
                    await self._gateway.logout(tokens.refresh_token)
                except AuthError as e:
                    logger.warning(f"Logout request failed, clearing session anyway: {e}")
        finally:
            self._pending -= 1
            self._store.clear()
            self._user = None
            self._set_state(SessionState.UNAUTHENTICATED)
        logger.info("Logged out")

    def _on_session_expired(self) -> None:
        self._user = None
        if self._state is SessionState.AUTHENTICATED:
            logger.info("Session expired, refresh token rejected")
            self._set_state(SessionState.UNAUTHENTICATED)
