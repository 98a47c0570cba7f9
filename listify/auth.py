"""
Authentication & Session State.

Provides ``SessionManager``, a request-scoped wrapper around the signed
cookie session (``request.session``) that carries a single meaningful
field, ``userID``.

States::

    ANONYMOUS ──begin_resolving()──▶ RESOLVING ──bind()──▶ AUTHENTICATED
        ▲                               │                        │
        └──────abort_resolving()────────┘                        │
        └─────────────────────────clear()────────────────────────┘

An absent ``userID`` key means the browser never authenticated (or logged
out).  ``RESOLVING`` lives only on the wrapper, never in the cookie.

Usage::

    session = SessionManager(request.session)
    if session.is_authenticated:
        user_id = session.require_user_id()
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Optional

from listify.errors import AuthenticationRequiredError
from listify.models.enums import SessionState

SESSION_USER_KEY: str = "userID"


class SessionManager:
    """Holder for the identity bound to one browser session.

    Each request builds its own instance over that request's session
    mapping; nothing is shared between requests.
    """

    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self._store: MutableMapping[str, Any] = store
        self._resolving: bool = False

    @property
    def user_id(self) -> Optional[int]:
        """The bound user reference, or ``None``.

        Values that are not integers (tampered or legacy cookies) are
        treated as absent.
        """
        raw = self._store.get(SESSION_USER_KEY)
        if raw is None or isinstance(raw, bool):
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None

    @property
    def state(self) -> SessionState:
        if self._resolving:
            return SessionState.RESOLVING
        if self.user_id is None:
            return SessionState.ANONYMOUS
        return SessionState.AUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a user id is bound and no resolution is in flight."""
        return self.state == SessionState.AUTHENTICATED

    def require_user_id(self) -> int:
        """Return the bound user id.

        Raises:
            AuthenticationRequiredError: If no user is bound.
        """
        user_id = self.user_id
        if user_id is None:
            raise AuthenticationRequiredError("Session carries no user reference.")
        return user_id

    def begin_resolving(self) -> Optional[int]:
        """Enter ``RESOLVING`` and return the reference to resolve (may be ``None``)."""
        self._resolving = True
        return self.user_id

    def abort_resolving(self) -> None:
        """Leave ``RESOLVING`` without touching the cookie."""
        self._resolving = False

    def bind(self, user_id: int) -> None:
        """Record *user_id* as the authenticated session user."""
        self._store[SESSION_USER_KEY] = user_id
        self._resolving = False

    def clear(self) -> None:
        """Remove the user reference, ending the session."""
        self._store.clear()
        self._resolving = False
