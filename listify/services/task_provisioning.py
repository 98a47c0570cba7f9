"""
Task Provisioning Workflow.

Adds a task for whoever the session belongs to, creating that someone if
necessary:

    1. Resolve the session reference to a user id (may insert a user).
    2. Insert the task under the default category.
    3. Re-read the user's tasks and confirm the new row is there.
    4. Bind the user id into the session.

Steps 1-3 share one transaction: if any of them fails, neither the user
nor the task is kept and the session is left exactly as it was.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from listify.auth import SessionManager
from listify.database import DatabaseManager
from listify.errors import ConflictError, InvalidInputError
from listify.logger import StructuredLogger
from listify.models.enums import Category
from listify.models.service_models import NewTaskInput, ProvisionedTask
from listify.repositories.task_repository import TaskRepository
from listify.services.base_service import StoreService
from listify.services.identity_resolver import IdentityResolverService
from listify.utils.audit import log_audit_event


class TaskProvisioningService(StoreService):
    """Orchestrates identity resolution and task creation."""

    def __init__(
        self,
        resolver: IdentityResolverService,
        task_repo: TaskRepository,
        db: DatabaseManager,
        logger: StructuredLogger,
        store_timeout_s: float,
        default_category: Category,
    ) -> None:
        super().__init__(db, logger, store_timeout_s)
        self._resolver = resolver
        self._task_repo = task_repo
        self._default_category = default_category

    async def provision_task(self, session: SessionManager, description: str) -> ProvisionedTask:
        """Create a task from *description* and bind its owner to *session*.

        Raises:
            InvalidInputError: *description* is blank or too long.  No store
                access happens in that case.
            ConflictError, StoreUnavailableError: A store step failed; the
                whole workflow was rolled back.
        """
        try:
            draft = NewTaskInput(description=description)
        except ValidationError as exc:
            raise InvalidInputError("Invalid task description.", original_error=exc) from exc

        session_user_ref: Optional[int] = session.begin_resolving()
        try:
            provisioned = await self._unit_of_work(
                self._provision_in_transaction, session_user_ref, draft.description,
            )
        except Exception:
            session.abort_resolving()
            raise

        session.bind(provisioned.identity.user_id)
        self._logger.info(
            "Provisioned task %s for user %s (%s); user now has %d task(s).",
            provisioned.task.id,
            provisioned.identity.user_id,
            provisioned.identity.origin,
            provisioned.task_count,
        )
        return provisioned

    def _provision_in_transaction(
        self, session_user_ref: Optional[int], description: str,
    ) -> ProvisionedTask:
        identity = self._resolver.resolve_in_transaction(session_user_ref)

        task = self._task_repo.insert(
            user_id=identity.user_id,
            description=description,
            category=self._default_category,
        )

        # Read-after-write check: the new row must be visible to its owner.
        tasks = self._task_repo.list_by_user(identity.user_id)
        if not any(existing.id == task.id for existing in tasks):
            raise ConflictError(
                f"Task {task.id} missing from re-read for user {identity.user_id}",
            )

        log_audit_event(
            logger=self._logger,
            action="CREATE_TASK",
            entity_type="Task",
            entity_id=task.id,
            user_id=identity.user_id,
            details={"category": str(task.category)},
            conn=self._db.sqlite,
        )
        return ProvisionedTask(identity=identity, task=task, task_count=len(tasks))
