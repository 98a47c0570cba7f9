"""
Audit trail for Listify state changes.

Provisioning, task edits, moves, archives, deletions and profile updates
each emit one ``AUDIT:`` log line and, given a connection, one
``audit_log`` row written inside the caller's transaction.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from listify.logger import StructuredLogger

__all__ = ["AuditEvent", "log_audit_event", "persist_audit_event"]

# Flat scalar values only; nested structures do not belong in the audit log.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """One row of ``audit_log``."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: Union[str, int],
    user_id: Union[str, int],
    details: Optional[dict[str, DetailValue]] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> None:
    """Emit an ``AUDIT:`` line and, when *conn* is given, an ``audit_log`` row.

    The caller owns the transaction when *conn* is given: the row is
    written but not committed, so it lands (or rolls back) together with
    the change it describes.

    Args:
        logger: Where the ``AUDIT:`` line goes.
        action: What happened (e.g. ``"CREATE_TASK"``, ``"DELETE_CATEGORY"``).
        entity_type: Type of entity affected (``"Task"`` or ``"User"``).
        entity_id: Primary key (or scope key) of the affected entity.
        user_id: The session user that caused the change.
        details: Flat extra context such as ``affected`` or ``from``/``to``.
        conn: Connection with an open unit of work, or ``None`` to only log.
    """
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        user_id=str(user_id),
        details=details or {},
    )
    logger.info("AUDIT: %s", json.dumps(event.model_dump(), default=str))

    # Persistence failures are logged, not raised.
    if conn is not None:
        try:
            persist_audit_event(conn, event)
        except sqlite3.Error as db_err:
            logger.warning("Failed to persist audit event to SQLite: %s", db_err)


def persist_audit_event(conn: sqlite3.Connection, event: AuditEvent) -> None:
    """Write a validated audit event to the ``audit_log`` table (no commit)."""
    conn.execute(
        """
        INSERT INTO audit_log (timestamp, action, entity_type, entity_id, user_id, details)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            event.timestamp,
            event.action,
            event.entity_type,
            event.entity_id,
            event.user_id,
            json.dumps(event.details, default=str),
        ),
    )
