"""
User Management Service.

Login by id, profile updates and account deletion.  No password is
verified on login; the stored credential hash is only written here.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from listify.database import DatabaseManager
from listify.errors import InvalidInputError
from listify.logger import StructuredLogger
from listify.models.service_models import MutationResult, ProfileUpdateInput
from listify.models.user import User
from listify.repositories.user_repository import UserRepository
from listify.services.base_service import StoreService
from listify.utils.audit import log_audit_event
from listify.utils.security import hash_password


class UserService(StoreService):
    """Service layer for user account operations."""

    def __init__(
        self,
        repo: UserRepository,
        db: DatabaseManager,
        logger: StructuredLogger,
        store_timeout_s: float,
        password_hash_iterations: int,
    ) -> None:
        super().__init__(db, logger, store_timeout_s)
        self._repo = repo
        self._password_hash_iterations = password_hash_iterations

    async def find_user(self, user_id: int) -> Optional[User]:
        """Return the user to log in as, or ``None`` if the id is unknown."""
        user = await self._read(self._repo.get_by_id, user_id)
        if user is None:
            self._logger.info("Login refused: user %s does not exist.", user_id)
        return user

    async def update_profile(
        self,
        user_id: int,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> MutationResult[User]:
        """Overwrite the given profile fields; blank fields keep stored values.

        Raises:
            InvalidInputError: A field failed validation (before any store access).
        """
        try:
            profile = ProfileUpdateInput(
                full_name=full_name or None,
                email=email or None,
                password=password or None,
            )
        except ValidationError as exc:
            raise InvalidInputError("Invalid profile fields.", original_error=exc) from exc

        password_hash: Optional[str] = (
            hash_password(profile.password, self._password_hash_iterations)
            if profile.password
            else None
        )
        rows = await self._unit_of_work(
            self._update_and_audit, user_id, profile, password_hash,
        )
        return MutationResult[User](rows=rows)

    async def delete_user(self, user_id: int) -> MutationResult[User]:
        """Hard-delete the user and, by cascade, all of their tasks."""
        rows = await self._unit_of_work(self._delete_and_audit, user_id)
        return MutationResult[User](rows=rows)

    # ------------------------------------------------------------------
    # Private implementation
    # ------------------------------------------------------------------

    def _update_and_audit(
        self,
        user_id: int,
        profile: ProfileUpdateInput,
        password_hash: Optional[str],
    ) -> list[User]:
        rows = self._repo.update_profile(
            user_id,
            full_name=profile.full_name,
            email=profile.email,
            password_hash=password_hash,
        )
        if not rows:
            self._logger.info("Profile update matched no user %s.", user_id)
            return rows

        log_audit_event(
            logger=self._logger,
            action="UPDATE_PROFILE",
            entity_type="User",
            entity_id=user_id,
            user_id=user_id,
            details={
                "full_name": profile.full_name is not None,
                "email": profile.email is not None,
                "password": password_hash is not None,
            },
            conn=self._db.sqlite,
        )
        return rows

    def _delete_and_audit(self, user_id: int) -> list[User]:
        rows = self._repo.delete(user_id)
        if not rows:
            self._logger.info("Delete matched no user %s.", user_id)
            return rows

        log_audit_event(
            logger=self._logger,
            action="DELETE_USER",
            entity_type="User",
            entity_id=user_id,
            user_id=user_id,
            conn=self._db.sqlite,
        )
        return rows
