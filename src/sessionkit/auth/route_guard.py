"""Access control for protected views."""

import logging
from dataclasses import dataclass

from sessionkit.api.exceptions import NotAuthenticatedError
from sessionkit.auth.session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardDecision:
    """Whether a view may be shown, and where to go if not."""

    allowed: bool
    redirect_to: str | None = None


class RouteGuard:
    """Permits protected views only when a session is possibly authenticated."""

    def __init__(self, session: SessionManager, login_path: str = "/login"):
        self._session = session
        self.login_path = login_path

    def check(self, path: str) -> GuardDecision:
        if self._session.is_authenticated():
            logger.debug(f"Access to {path} allowed")
            return GuardDecision(allowed=True)
        logger.info(f"Not authenticated, redirecting {path} to {self.login_path}")
        return GuardDecision(allowed=False, redirect_to=self.login_path)

    def require(self, path: str | None = None) -> None:
        """Raise NotAuthenticatedError unless access to ``path`` is allowed."""
        if not self.check(path or "/").allowed:
            raise NotAuthenticatedError(path)
