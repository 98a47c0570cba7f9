# tests/helpers.py

from __future__ import annotations

from datetime import datetime, timezone

from listify.database import DatabaseManager


def count_rows(db: DatabaseManager, table: str) -> int:
    with db.lock:
        return int(db.sqlite.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])


def audit_actions(db: DatabaseManager) -> list[str]:
    with db.lock:
        rows = db.sqlite.execute("SELECT action FROM audit_log ORDER BY id").fetchall()
    return [row["action"] for row in rows]


def at(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)
