"""Service layer for sessionkit."""

from sessionkit.services.session import SessionService

__all__ = ["SessionService"]
