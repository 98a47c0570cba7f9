"""Shared utility functions for the Listify application.

Convenience re-exports so consumers can import directly from
``listify.utils`` while full absolute imports remain supported.
"""

from listify.utils.audit import AuditEvent, log_audit_event
from listify.utils.security import hash_password, verify_password

__all__ = [
    "AuditEvent",
    "hash_password",
    "log_audit_event",
    "verify_password",
]
