"""
Shared Enumerations for Listify Models.

StrEnum values compare equal to their string equivalents, so values read
back from SQLite (plain ``str``) can be compared directly.
"""

from __future__ import annotations

from enum import StrEnum


class Category(StrEnum):
    """The four fixed task lists.

    Declaration order is the display order of the landing view.
    """

    EAT = "eat"
    BUY = "buy"
    READ = "read"
    WATCH = "watch"

    @property
    def list_key(self) -> str:
        """Template variable holding this category's tasks (``eats`` etc.)."""
        return _LIST_KEYS[self]


_LIST_KEYS: dict[Category, str] = {
    Category.EAT: "eats",
    Category.BUY: "buys",
    Category.READ: "reads",
    Category.WATCH: "watches",
}


class SessionState(StrEnum):
    """Lifecycle of the identity carried by a browser session.

    ``RESOLVING`` is only observable while a task provisioning request is
    in flight; it is never written to the cookie.
    """

    ANONYMOUS = "ANONYMOUS"
    RESOLVING = "RESOLVING"
    AUTHENTICATED = "AUTHENTICATED"


class IdentityOrigin(StrEnum):
    """How the Identity Resolver produced a user id."""

    EXISTING = "EXISTING"
    CREATED = "CREATED"
    # The session referenced an id with no matching row.
    REPLACED_STALE = "REPLACED_STALE"
