"""
SQLite connection holder.

``DatabaseManager`` opens the one connection Listify uses and owns its
transaction boundaries.  Queries live in the repositories.

Services run repository calls on worker threads, so every statement is
issued while holding :pyattr:`DatabaseManager.lock`.

Usage::

    db = DatabaseManager(Path("listify.db"), StructuredLogger(name="listify.database"))
    with db.transaction():
        ...  # statements here commit together
    db.close()
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from listify.errors import StoreUnavailableError
from listify.logger import StructuredLogger


class CommitGuard:
    """Settles, exactly once, whether a unit of work may commit.

    The worker thread calls :meth:`claim_commit` just before ``commit()``;
    a caller that stopped waiting calls :meth:`abandon`.  Whichever comes
    first wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcome: Optional[str] = None

    def claim_commit(self) -> bool:
        with self._lock:
            if self._outcome is None:
                self._outcome = "commit"
            return self._outcome == "commit"

    def abandon(self) -> bool:
        """Return ``False`` if the commit was already claimed."""
        with self._lock:
            if self._outcome is None:
                self._outcome = "abandoned"
            return self._outcome == "abandoned"


class DatabaseManager:
    """The shared SQLite connection plus its lock.

    Parameters
    ----------
    sqlite_path:
        Filesystem path for the SQLite database file.  Parent directories
        are created when missing.
    logger:
        Destination for connection and transaction log lines.
    """

    def __init__(self, sqlite_path: Path, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger
        self._lock: threading.RLock = threading.RLock()
        self._transaction_owner: int | None = None
        self._closed: bool = False
        self._sqlite_conn: sqlite3.Connection = self._connect_sqlite(sqlite_path)

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def sqlite(self) -> sqlite3.Connection:
        """The shared connection; use it under :pyattr:`lock`."""
        return self._sqlite_conn

    @property
    def lock(self) -> threading.RLock:
        """Return the lock guarding the shared connection.

        Every statement, read or write, runs while holding it::

            with db.lock:
                db.sqlite.execute("SELECT ...")
        """
        return self._lock

    @property
    def in_transaction(self) -> bool:
        """``True`` when the calling thread is inside :meth:`transaction`.

        Repository code checks this flag before issuing ``commit()`` so
        that multi-statement units of work commit once, at the end.
        """
        return self._transaction_owner == threading.get_ident()

    @contextmanager
    def transaction(
        self, guard: Optional[CommitGuard] = None,
    ) -> Generator[None, None, None]:
        """Run the enclosed statements as one atomic unit.

        Holds :pyattr:`lock` for the whole block.  On normal exit a single
        ``commit()`` is issued; on exception the transaction is rolled back
        and the error re-raised.  Re-entrant: a nested block joins the
        outer transaction.

        With a *guard*, the commit only happens if the guard has not been
        abandoned by the waiting caller; otherwise the block is rolled back
        and ``StoreUnavailableError`` is raised in the worker thread.
        """
        with self._lock:
            if self.in_transaction:
                yield
                return

            self._transaction_owner = threading.get_ident()
            try:
                yield
                if guard is not None and not guard.claim_commit():
                    raise StoreUnavailableError(
                        "Unit of work abandoned by its caller before commit",
                    )
                self._sqlite_conn.commit()
            except BaseException:
                self._sqlite_conn.rollback()
                self._logger.warning("Transaction rolled back.", exc_info=True)
                raise
            finally:
                self._transaction_owner = None

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the connection.  Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._sqlite_conn.close()
            self._closed = True
            self._logger.info("Listify database closed.")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _connect_sqlite(self, path: Path) -> sqlite3.Connection:
        """Open *path*, creating the file and its directory if needed.

        Rows come back as ``sqlite3.Row``; WAL journaling and foreign keys
        (for the ``tasks`` -> ``users`` cascade) are switched on.

        Raises
        ------
        PermissionError
            The file or its directory is not writable.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(path), check_same_thread=False)
        except PermissionError as exc:
            self._logger.error("Listify database at %s is not writable: %s", path, exc)
            raise

        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA foreign_keys = ON")
        self._logger.info("Listify database ready at %s", path)
        return conn
