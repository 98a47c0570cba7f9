"""
User Repository.

Handles all data access for the ``users`` table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from listify.database import DatabaseManager
from listify.logger import StructuredLogger
from listify.models.user import User
from listify.repositories.base_repository import BaseRepository, utc_now


class UserRepository(BaseRepository):
    """Data access layer for User entities."""

    TABLE = "users"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Fetch a user by primary key, or ``None`` when no row matches."""
        row = self._fetch_one(
            f"SELECT * FROM {self.TABLE} WHERE id = ?", (user_id,)
        )
        return User(**dict(row)) if row else None

    def create(self, created_at: Optional[datetime] = None) -> User:
        """Insert a user with an empty profile and return it.

        The id is assigned by the store.
        """
        timestamp: datetime = created_at or utc_now()
        row = self._write(
            f"""
            INSERT INTO {self.TABLE} (full_name, email, password, created_at)
            VALUES (NULL, NULL, NULL, ?)
            RETURNING *
            """,
            (timestamp.isoformat(),),
        )[0]
        user = User(**dict(row))
        self._logger.info("User created: %s", user.id)
        return user

    def update_profile(
        self,
        user_id: int,
        full_name: Optional[str],
        email: Optional[str],
        password_hash: Optional[str],
    ) -> list[User]:
        """Overwrite the supplied profile fields; ``None`` keeps the stored value."""
        rows = self._write(
            f"""
            UPDATE {self.TABLE}
            SET full_name = COALESCE(?, full_name),
                email     = COALESCE(?, email),
                password  = COALESCE(?, password)
            WHERE id = ?
            RETURNING *
            """,
            (full_name, email, password_hash, user_id),
        )
        return [User(**dict(row)) for row in rows]

    def delete(self, user_id: int) -> list[User]:
        """Hard-delete a user.  Their tasks go with them (``ON DELETE CASCADE``)."""
        rows = self._write(
            f"DELETE FROM {self.TABLE} WHERE id = ? RETURNING *", (user_id,)
        )
        return [User(**dict(row)) for row in rows]
