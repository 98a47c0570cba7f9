"""
Listify SQLite schema.

Two domain tables (``users`` and ``tasks``) plus ``audit_log`` and a
one-row ``schema_version`` bookkeeping table.  :func:`initialize_schema`
runs at every startup and brings the file up to
:data:`CURRENT_SCHEMA_VERSION`:

- an empty file gets every object in :data:`_DDL` at once;
- an older file replays the steps in :data:`_UPGRADES` above its version.

Either path, together with the version bump, is a single transaction.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable

from listify.logger import StructuredLogger
from listify.models.enums import Category

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

CURRENT_SCHEMA_VERSION: int = 2

_ALLOWED_CATEGORIES: str = ", ".join(f"'{category.value}'" for category in Category)

_VERSION_TABLE: str = """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

_TASK_LOOKUP_INDEX: str = """
    CREATE INDEX IF NOT EXISTS idx_tasks_user_category
        ON tasks(user_id, category, active, last_modified)
"""

_DDL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        full_name TEXT,
        email TEXT,
        password TEXT,
        created_at TEXT NOT NULL
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        description TEXT NOT NULL,
        category TEXT NOT NULL CHECK (category IN ({_ALLOWED_CATEGORIES})),
        last_modified TEXT NOT NULL,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        action TEXT NOT NULL,
        entity_type TEXT NOT NULL,
        entity_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        details TEXT NOT NULL DEFAULT '{}'
    )
    """,
    _TASK_LOOKUP_INDEX,
)

Upgrade = Callable[[sqlite3.Connection, StructuredLogger], None]


def _add_task_lookup_index(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Version 2: index backing the per-category landing queries."""
    conn.execute(_TASK_LOOKUP_INDEX)
    logger.info("Schema v2: idx_tasks_user_category created.")


# Target version -> step.  Steps never commit.
_UPGRADES: dict[int, Upgrade] = {
    2: _add_task_lookup_index,
}


def _stored_version(conn: sqlite3.Connection) -> int:
    conn.execute(_VERSION_TABLE)
    conn.commit()
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return int(row[0]) if row else 0


def _record_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(
        "INSERT INTO schema_version (id, version) VALUES (1, ?) "
        "ON CONFLICT(id) DO UPDATE SET version = excluded.version, "
        "applied_at = CURRENT_TIMESTAMP",
        (version,),
    )


def _upgrade(conn: sqlite3.Connection, logger: StructuredLogger, stored: int) -> None:
    if stored == 0:
        for statement in _DDL:
            conn.execute(statement)
        logger.info("Fresh database: %d schema objects created.", len(_DDL))
        return

    for target in sorted(v for v in _UPGRADES if stored < v <= CURRENT_SCHEMA_VERSION):
        logger.info("Applying schema upgrade to v%d.", target)
        _UPGRADES[target](conn, logger)


def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Bring *conn* up to :data:`CURRENT_SCHEMA_VERSION`; no-op when current.

    A failing upgrade is rolled back and re-raised, leaving the stored
    version untouched for the next startup to retry.
    """
    stored = _stored_version(conn)
    if stored >= CURRENT_SCHEMA_VERSION:
        logger.info("Schema at v%d, nothing to do.", stored)
        return

    try:
        _upgrade(conn, logger, stored)
        _record_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.error("Schema upgrade from v%d failed and was rolled back.", stored)
        raise

    logger.info("Schema upgraded from v%d to v%d.", stored, CURRENT_SCHEMA_VERSION)
