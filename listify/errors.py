"""
Typed Error Taxonomy.

Every failure that can leave a service is one of the classes below.  Each
carries an :class:`ErrorKind`, a stable client-facing message and the
original exception (if any) for the logs.  The web layer maps kinds to
HTTP responses; raw driver errors never reach the client.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

__all__ = [
    "AuthenticationRequiredError",
    "ConflictError",
    "ErrorKind",
    "InvalidInputError",
    "ListifyError",
    "NotFoundError",
    "PUBLIC_MESSAGES",
    "StoreUnavailableError",
]


class ErrorKind(StrEnum):
    """Exhaustive enumeration of failure categories."""

    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"
    INVALID_INPUT = "invalid_input"


PUBLIC_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "Please sign in to continue.",
    ErrorKind.NOT_FOUND: "The requested page does not exist.",
    ErrorKind.CONFLICT: "Your change could not be saved. Please try again.",
    ErrorKind.STORE_UNAVAILABLE: "Your lists are temporarily unavailable. Please try again later.",
    ErrorKind.INVALID_INPUT: "Some of the submitted values are invalid.",
}


class ListifyError(Exception):
    """Base class for all classified failures."""

    kind: ErrorKind = ErrorKind.STORE_UNAVAILABLE

    def __init__(self, message: str, original_error: Optional[BaseException] = None) -> None:
        self.message: str = message
        self.original_error: Optional[BaseException] = original_error
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        """Message safe to show to the client."""
        return PUBLIC_MESSAGES[self.kind]


class AuthenticationRequiredError(ListifyError):
    """The session carries no resolvable user reference."""

    kind = ErrorKind.AUTHENTICATION


class NotFoundError(ListifyError):
    """A resource addressed by the request does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(ListifyError):
    """The store rejected a write or a read-after-write check failed."""

    kind = ErrorKind.CONFLICT


class StoreUnavailableError(ListifyError):
    """The relational store failed or did not answer in time."""

    kind = ErrorKind.STORE_UNAVAILABLE


class InvalidInputError(ListifyError):
    """Submitted values failed validation before any store access."""

    kind = ErrorKind.INVALID_INPUT
