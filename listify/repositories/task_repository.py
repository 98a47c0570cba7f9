"""
Task Repository.

Handles all data access for the ``tasks`` table.  Every write is scoped by
the owning user, so one user can never touch another user's rows, and
every write returns the affected rows (empty when nothing matched).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from listify.database import DatabaseManager
from listify.logger import StructuredLogger
from listify.models.enums import Category
from listify.models.task import Task
from listify.repositories.base_repository import BaseRepository, utc_now


class TaskRepository(BaseRepository):
    """Data access layer for Task entities."""

    TABLE = "tasks"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_by_user(self, user_id: int) -> list[Task]:
        """All tasks of a user, active or not, in insertion order."""
        rows = self._fetch_all(
            f"SELECT * FROM {self.TABLE} WHERE user_id = ? ORDER BY id",
            (user_id,),
        )
        return [Task(**dict(row)) for row in rows]

    def list_active_by_category(self, user_id: int, category: Category) -> list[Task]:
        """Active tasks of one category, most recently modified first."""
        rows = self._fetch_all(
            f"""
            SELECT * FROM {self.TABLE}
            WHERE user_id = ? AND category = ? AND active = 1
            ORDER BY last_modified DESC, id DESC
            """,
            (user_id, str(category)),
        )
        return [Task(**dict(row)) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(
        self,
        user_id: int,
        description: str,
        category: Category,
        last_modified: Optional[datetime] = None,
        active: bool = True,
    ) -> Task:
        """Insert a task and return it with its store-assigned id."""
        timestamp: datetime = last_modified or utc_now()
        row = self._write(
            f"""
            INSERT INTO {self.TABLE} (user_id, last_modified, description, category, active)
            VALUES (?, ?, ?, ?, ?)
            RETURNING *
            """,
            (user_id, timestamp.isoformat(), description, str(category), int(active)),
        )[0]
        return Task(**dict(row))

    def update_description(self, user_id: int, task_id: int, description: str) -> list[Task]:
        rows = self._write(
            f"""
            UPDATE {self.TABLE}
            SET description = ?, last_modified = ?
            WHERE user_id = ? AND id = ?
            RETURNING *
            """,
            (description, utc_now().isoformat(), user_id, task_id),
        )
        return [Task(**dict(row)) for row in rows]

    def move_category(
        self,
        user_id: int,
        current: Category,
        target: Category,
        task_id: Optional[int] = None,
    ) -> list[Task]:
        """Re-file tasks from *current* to *target*.

        With *task_id* only that task moves (if it is in *current*);
        without it every task of the user in *current* moves.
        """
        sql = (
            f"UPDATE {self.TABLE} SET category = ?, last_modified = ? "
            "WHERE user_id = ? AND category = ?"
        )
        params: list[object] = [str(target), utc_now().isoformat(), user_id, str(current)]
        if task_id is not None:
            sql += " AND id = ?"
            params.append(task_id)
        rows = self._write(sql + " RETURNING *", params)
        return [Task(**dict(row)) for row in rows]

    def set_active(self, user_id: int, task_id: int, active: bool) -> list[Task]:
        rows = self._write(
            f"""
            UPDATE {self.TABLE}
            SET active = ?, last_modified = ?
            WHERE user_id = ? AND id = ?
            RETURNING *
            """,
            (int(active), utc_now().isoformat(), user_id, task_id),
        )
        return [Task(**dict(row)) for row in rows]

    def delete(self, user_id: int, task_id: int) -> list[Task]:
        rows = self._write(
            f"DELETE FROM {self.TABLE} WHERE user_id = ? AND id = ? RETURNING *",
            (user_id, task_id),
        )
        return [Task(**dict(row)) for row in rows]

    def delete_category(self, user_id: int, category: Category) -> list[Task]:
        rows = self._write(
            f"DELETE FROM {self.TABLE} WHERE user_id = ? AND category = ? RETURNING *",
            (user_id, str(category)),
        )
        return [Task(**dict(row)) for row in rows]
