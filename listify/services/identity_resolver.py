"""
Identity Resolver Service.

Turns the user reference carried by a session into the id of an existing
user row, provisioning a new user just in time when needed.

Resolution rules:
    - Reference present and row found: return it unchanged, no insert.
    - Reference absent: create a user with an empty profile.
    - Reference present but no row (stale cookie, deleted user): create a
      user as well, reported as ``REPLACED_STALE`` rather than ``CREATED``
      so an unknown id is never mistaken for an anonymous visitor.

At most one insert per call.  There is no retry and no deduplication: two
anonymous resolutions create two users.
"""

from __future__ import annotations

from typing import Optional

from listify.database import DatabaseManager
from listify.logger import StructuredLogger
from listify.models.enums import IdentityOrigin
from listify.models.service_models import ResolvedIdentity
from listify.repositories.user_repository import UserRepository
from listify.services.base_service import StoreService
from listify.utils.audit import log_audit_event


class IdentityResolverService(StoreService):
    """Resolves or lazily creates the user behind a session reference."""

    def __init__(
        self,
        repo: UserRepository,
        db: DatabaseManager,
        logger: StructuredLogger,
        store_timeout_s: float,
    ) -> None:
        super().__init__(db, logger, store_timeout_s)
        self._repo = repo

    async def resolve(self, session_user_ref: Optional[int]) -> ResolvedIdentity:
        """Resolve *session_user_ref* in its own transaction.

        Raises:
            ConflictError, StoreUnavailableError: Store failures, unchanged.
        """
        return await self._unit_of_work(self.resolve_in_transaction, session_user_ref)

    def resolve_in_transaction(self, session_user_ref: Optional[int]) -> ResolvedIdentity:
        """Synchronous core, for callers that already hold a transaction."""
        if session_user_ref is None:
            return self._provision(IdentityOrigin.CREATED, session_user_ref)

        existing = self._repo.get_by_id(session_user_ref)
        if existing is not None:
            return ResolvedIdentity(user_id=existing.id, origin=IdentityOrigin.EXISTING)

        self._logger.warning(
            "Identity Resolver: session references unknown user %s; "
            "provisioning a replacement.",
            session_user_ref,
        )
        return self._provision(IdentityOrigin.REPLACED_STALE, session_user_ref)

    def _provision(
        self, origin: IdentityOrigin, session_user_ref: Optional[int],
    ) -> ResolvedIdentity:
        user = self._repo.create()

        log_audit_event(
            logger=self._logger,
            action="JIT_CREATE",
            entity_type="User",
            entity_id=user.id,
            user_id=user.id,
            details={"origin": str(origin), "stale_ref": session_user_ref},
            conn=self._db.sqlite,
        )
        return ResolvedIdentity(user_id=user.id, origin=origin)
