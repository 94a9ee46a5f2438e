"""Authentication module for sessionkit."""

from sessionkit.auth.route_guard import GuardDecision, RouteGuard
from sessionkit.auth.session_manager import SessionManager, SessionState
from sessionkit.auth.token_store import (
    KeyringTokenStore,
    MemoryTokenStore,
    TokenStore,
    get_token_store,
)

__all__ = [
    # Token storage
    "TokenStore",
    "KeyringTokenStore",
    "MemoryTokenStore",
    "get_token_store",
    # Session
    "SessionManager",
    "SessionState",
    # Route guard
    "RouteGuard",
    "GuardDecision",
]
