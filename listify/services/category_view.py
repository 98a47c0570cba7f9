"""
Category View Aggregator.

Builds the landing page model: the user's profile plus the active tasks
of each of the four categories, newest first.  The profile and the four
category queries are dispatched concurrently and joined; if any of them
fails, the partial results are discarded and one error is raised.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from listify.database import DatabaseManager
from listify.errors import ListifyError, StoreUnavailableError
from listify.logger import StructuredLogger
from listify.models.enums import Category
from listify.models.service_models import CategoryView
from listify.models.task import Task
from listify.models.user import User
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository
from listify.services.base_service import StoreService


class CategoryViewService(StoreService):
    """Loads the per-category task lists for the landing view."""

    def __init__(
        self,
        user_repo: UserRepository,
        task_repo: TaskRepository,
        db: DatabaseManager,
        logger: StructuredLogger,
        store_timeout_s: float,
    ) -> None:
        super().__init__(db, logger, store_timeout_s)
        self._user_repo = user_repo
        self._task_repo = task_repo

    async def load_view(self, session_user_ref: Optional[int]) -> CategoryView:
        """Return the view for *session_user_ref*.

        An absent reference yields the anonymous view without touching the
        store.  A reference to a user that no longer exists yields the
        anonymous view too; the caller decides what to do with the session.

        Raises:
            StoreUnavailableError: Any of the five queries failed.
        """
        if session_user_ref is None:
            return CategoryView()

        categories: list[Category] = list(Category)
        try:
            profile, *task_lists = await asyncio.gather(
                self._read(self._user_repo.get_by_id, session_user_ref),
                *(
                    self._read(self._task_repo.list_active_by_category, session_user_ref, category)
                    for category in categories
                ),
            )
        except ListifyError as exc:
            self._logger.error(
                "Category view for user %s failed: %s", session_user_ref, exc.message,
            )
            raise StoreUnavailableError(
                f"Category view for user {session_user_ref} failed", original_error=exc,
            ) from exc

        return self._assemble(session_user_ref, profile, categories, task_lists)

    def _assemble(
        self,
        session_user_ref: int,
        profile: Optional[User],
        categories: list[Category],
        task_lists: list[list[Task]],
    ) -> CategoryView:
        if profile is None:
            self._logger.info(
                "Category view: user %s no longer exists; serving anonymous view.",
                session_user_ref,
            )
            return CategoryView()

        return CategoryView(
            profile=profile.to_profile(),
            tasks_by_category={
                category: [task.to_view() for task in tasks]
                for category, tasks in zip(categories, task_lists)
            },
        )
