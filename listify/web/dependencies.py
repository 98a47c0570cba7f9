"""
Request-scoped dependencies for the route handlers.

``require_user_id`` is the authentication gate: it runs before the
handler body, so an anonymous request never reaches a service or the
store.
"""

from __future__ import annotations

from fastapi import Depends, Request

from listify.auth import SessionManager
from listify.services import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_session(request: Request) -> SessionManager:
    """One ``SessionManager`` per request (FastAPI caches it for the request)."""
    return SessionManager(request.session)


def require_user_id(session: SessionManager = Depends(get_session)) -> int:
    """Return the authenticated user id.

    Raises:
        AuthenticationRequiredError: Handled app-wide as a redirect to ``/``.
    """
    return session.require_user_id()
