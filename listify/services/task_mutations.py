"""
Task Mutation Service.

Single-statement edits of a user's tasks: edit description, move between
categories, archive, delete one task and clear a whole category.

Every operation is scoped by the authenticated user id and returns a
:class:`MutationResult`.  Nothing matching is a no-op (empty result), not
an error; store failures raise the typed errors from ``listify.errors``.
"""

from __future__ import annotations

from typing import Callable, Optional

from pydantic import ValidationError

from listify.database import DatabaseManager
from listify.errors import InvalidInputError
from listify.logger import StructuredLogger
from listify.models.enums import Category
from listify.models.service_models import MutationResult, NewTaskInput
from listify.models.task import Task
from listify.repositories.task_repository import TaskRepository
from listify.services.base_service import StoreService
from listify.utils.audit import log_audit_event


class TaskMutationService(StoreService):
    """Service layer for editing and removing tasks."""

    def __init__(
        self,
        task_repo: TaskRepository,
        db: DatabaseManager,
        logger: StructuredLogger,
        store_timeout_s: float,
    ) -> None:
        super().__init__(db, logger, store_timeout_s)
        self._task_repo = task_repo

    async def edit_description(
        self, user_id: int, task_id: int, description: str,
    ) -> MutationResult[Task]:
        try:
            draft = NewTaskInput(description=description)
        except ValidationError as exc:
            raise InvalidInputError("Invalid task description.", original_error=exc) from exc

        return await self._mutate(
            "EDIT_TASK",
            user_id,
            f"task:{task_id}",
            lambda: self._task_repo.update_description(user_id, task_id, draft.description),
        )

    async def move_category(
        self,
        user_id: int,
        current: Category,
        target: Category,
        task_id: Optional[int] = None,
    ) -> MutationResult[Task]:
        """Move one task (or, without *task_id*, the whole list) to *target*."""
        scope = f"category:{current}" if task_id is None else f"task:{task_id}"
        return await self._mutate(
            "MOVE_CATEGORY",
            user_id,
            scope,
            lambda: self._task_repo.move_category(user_id, current, target, task_id=task_id),
            details={"from": str(current), "to": str(target)},
        )

    async def archive_task(self, user_id: int, task_id: int) -> MutationResult[Task]:
        """Hide a task from every list while keeping its row."""
        return await self._mutate(
            "ARCHIVE_TASK",
            user_id,
            f"task:{task_id}",
            lambda: self._task_repo.set_active(user_id, task_id, active=False),
        )

    async def delete_task(self, user_id: int, task_id: int) -> MutationResult[Task]:
        return await self._mutate(
            "DELETE_TASK",
            user_id,
            f"task:{task_id}",
            lambda: self._task_repo.delete(user_id, task_id),
        )

    async def delete_category(self, user_id: int, category: Category) -> MutationResult[Task]:
        return await self._mutate(
            "DELETE_CATEGORY",
            user_id,
            f"category:{category}",
            lambda: self._task_repo.delete_category(user_id, category),
        )

    # ------------------------------------------------------------------
    # Private implementation
    # ------------------------------------------------------------------

    async def _mutate(
        self,
        action: str,
        user_id: int,
        scope: str,
        write: Callable[[], list[Task]],
        details: Optional[dict[str, str]] = None,
    ) -> MutationResult[Task]:
        rows = await self._unit_of_work(
            self._write_and_audit, action, user_id, scope, write, details or {},
        )
        return MutationResult[Task](rows=rows)

    def _write_and_audit(
        self,
        action: str,
        user_id: int,
        scope: str,
        write: Callable[[], list[Task]],
        details: dict[str, str],
    ) -> list[Task]:
        rows = write()
        if not rows:
            self._logger.info("%s matched nothing for user %s (%s).", action, user_id, scope)
            return rows

        log_audit_event(
            logger=self._logger,
            action=action,
            entity_type="Task",
            entity_id=scope,
            user_id=user_id,
            details={**details, "affected": len(rows)},
            conn=self._db.sqlite,
        )
        return rows
