"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference and logger
- Locked statement execution against the shared connection
- Translation of driver errors into the typed error taxonomy
- Transaction-aware commits
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Sequence

from listify.database import DatabaseManager
from listify.errors import (
    ConflictError,
    InvalidInputError,
    ListifyError,
    StoreUnavailableError,
)
from listify.logger import StructuredLogger

SqlParams = Sequence[object]

# Largest value a SQLite INTEGER column can hold.
MAX_ROW_ID: int = 2**63 - 1


def utc_now() -> datetime:
    """Timestamp used for ``created_at`` / ``last_modified`` columns."""
    return datetime.now(timezone.utc)


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Returns the shared SQLite connection."""
        return self._db.sqlite

    def _fetch_all(self, sql: str, params: SqlParams = ()) -> list[sqlite3.Row]:
        """Run *sql* and return every row.

        Used for plain SELECTs as well as ``... RETURNING *`` writes.

        Raises:
            ConflictError: The statement violated a constraint.
            InvalidInputError: A parameter does not fit a SQLite INTEGER.
            StoreUnavailableError: Any other driver failure.
        """
        with self._db.lock:
            try:
                return self.sqlite.execute(sql, tuple(params)).fetchall()
            except OverflowError as exc:
                self._logger.warning("Out-of-range parameter on %s: %s", self.TABLE, exc)
                raise InvalidInputError(
                    f"Parameter out of range on {self.TABLE}", original_error=exc,
                ) from exc
            except sqlite3.IntegrityError as exc:
                self._logger.warning(
                    "Constraint violation on %s: %s", self.TABLE, exc,
                )
                raise ConflictError(
                    f"Constraint violation on {self.TABLE}", original_error=exc,
                ) from exc
            except sqlite3.Error as exc:
                self._logger.error(
                    "SQLite statement failed on %s: %s", self.TABLE, exc,
                )
                raise StoreUnavailableError(
                    f"Store failure on {self.TABLE}", original_error=exc,
                ) from exc

    def _fetch_one(self, sql: str, params: SqlParams = ()) -> sqlite3.Row | None:
        rows = self._fetch_all(sql, params)
        return rows[0] if rows else None

    def _write(self, sql: str, params: SqlParams = ()) -> list[sqlite3.Row]:
        """Run a ``RETURNING`` write and commit unless a transaction is open."""
        with self._db.lock:
            try:
                rows = self._fetch_all(sql, params)
            except ListifyError:
                if not self._db.in_transaction:
                    self.sqlite.rollback()
                raise
            self._commit()
            return rows

    def _commit(self) -> None:
        """Commit now, or defer to :meth:`DatabaseManager.transaction`.

        All repository code should call ``self._commit()`` instead of
        ``self.sqlite.commit()`` so multi-statement units of work stay
        atomic.
        """
        if self._db.in_transaction:
            return
        try:
            self.sqlite.commit()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(
                f"Commit failed on {self.TABLE}", original_error=exc,
            ) from exc
