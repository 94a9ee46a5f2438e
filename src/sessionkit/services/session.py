"""Async session service wiring the HTTP client, token store and session."""

import logging

import httpx

from sessionkit import __version__
from sessionkit.api.gateway import AuthGateway
from sessionkit.api.request_client import AuthenticatedRequestClient
from sessionkit.auth.route_guard import RouteGuard
from sessionkit.auth.session_manager import SessionManager
from sessionkit.auth.token_store import TokenStore, get_token_store
from sessionkit.config import get_settings, validate_base_url

logger = logging.getLogger(__name__)


class SessionService:
    """Owns one HTTP client and the session components built on top of it.

    Usage:
        async with SessionService() as service:
            await service.session.initialize()
            response = await service.requests.get("/live-data")
    """

    def __init__(
        self,
        base_url: str | None = None,
        store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: int | None = None,
    ):
        """Initialize the service.

        Args:
            base_url: Server URL (defaults to settings)
            store: Token store (defaults to the one selected by settings)
            transport: Optional httpx transport, for tests
            timeout: HTTP timeout in seconds (defaults to settings)
        """
        settings = get_settings()
        self.base_url = validate_base_url(base_url or settings.base_url)
        self.store = store if store is not None else get_token_store()
        self._transport = transport
        self._timeout = timeout or settings.timeout
        self._login_path = settings.login_path
        self._client: httpx.AsyncClient | None = None
        self._gateway: AuthGateway | None = None
        self._requests: AuthenticatedRequestClient | None = None
        self._session: SessionManager | None = None
        self._guard: RouteGuard | None = None

    async def __aenter__(self) -> "SessionService":
        """Create the async HTTP client and session components."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Accept": "application/json",
                "User-Agent": f"sessionkit/{__version__}",
            },
            timeout=httpx.Timeout(float(self._timeout)),
            transport=self._transport,
        )
        self._gateway = AuthGateway(self._client)
        self._requests = AuthenticatedRequestClient(self._client, self.store, self._gateway)
        self._session = SessionManager(self.store, self._gateway, self._requests)
        self._guard = RouteGuard(self._session, login_path=self._login_path)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Cleanup HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_ready(self) -> None:
        if self._client is None:
            raise RuntimeError(
                "Service not initialized. Use 'async with SessionService() as service:'"
            )

    @property
    def gateway(self) -> AuthGateway:
        self._ensure_ready()
        assert self._gateway is not None
        return self._gateway

    @property
    def requests(self) -> AuthenticatedRequestClient:
        self._ensure_ready()
        assert self._requests is not None
        return self._requests

    @property
    def session(self) -> SessionManager:
        self._ensure_ready()
        assert self._session is not None
        return self._session

    @property
    def guard(self) -> RouteGuard:
        self._ensure_ready()
        assert self._guard is not None
        return self._guard
