# tests/test_task_mutations.py

from __future__ import annotations

import pytest

from listify.database import DatabaseManager
from listify.errors import InvalidInputError
from listify.logger import StructuredLogger
from listify.models.enums import Category
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository
from listify.services.task_mutations import TaskMutationService

from .helpers import at, audit_actions, count_rows


@pytest.fixture()
def mutations(
    task_repo: TaskRepository, db: DatabaseManager, logger: StructuredLogger,
) -> TaskMutationService:
    return TaskMutationService(task_repo=task_repo, db=db, logger=logger, store_timeout_s=5.0)


@pytest.fixture()
def user_id(user_repo: UserRepository) -> int:
    return user_repo.create().id


@pytest.mark.asyncio
async def test_move_changes_only_the_category(
    mutations: TaskMutationService, task_repo: TaskRepository, user_id: int,
) -> None:
    task = task_repo.insert(user_id, "Paperclips", Category.BUY)
    untouched = task_repo.insert(user_id, "Stamps", Category.BUY)

    result = await mutations.move_category(user_id, Category.BUY, Category.READ, task_id=task.id)

    assert result.affected == 1
    moved = result.rows[0]
    assert moved.id == task.id
    assert moved.description == "Paperclips"
    assert moved.category == Category.READ
    remaining = task_repo.list_active_by_category(user_id, Category.BUY)
    assert [t.id for t in remaining] == [untouched.id]


@pytest.mark.asyncio
async def test_move_without_task_id_moves_the_whole_list(
    mutations: TaskMutationService, task_repo: TaskRepository, user_id: int,
) -> None:
    task_repo.insert(user_id, "Milk", Category.BUY)
    task_repo.insert(user_id, "Bread", Category.BUY)

    result = await mutations.move_category(user_id, Category.BUY, Category.EAT)

    assert result.affected == 2
    assert task_repo.list_active_by_category(user_id, Category.BUY) == []


@pytest.mark.asyncio
async def test_delete_category_removes_only_that_category(
    mutations: TaskMutationService,
    task_repo: TaskRepository,
    db: DatabaseManager,
    user_id: int,
) -> None:
    for title in ("Alien", "Heat", "Ran"):
        task_repo.insert(user_id, title, Category.WATCH)
    for title in ("Dune", "Emma"):
        task_repo.insert(user_id, title, Category.READ)

    result = await mutations.delete_category(user_id, Category.WATCH)

    assert result.affected == 3
    assert {t.category for t in result.rows} == {Category.WATCH}
    assert [t.description for t in task_repo.list_by_user(user_id)] == ["Dune", "Emma"]
    assert count_rows(db, "tasks") == 2


@pytest.mark.asyncio
async def test_deleting_a_missing_task_reports_zero_rows(
    mutations: TaskMutationService,
    task_repo: TaskRepository,
    db: DatabaseManager,
    user_id: int,
) -> None:
    task = task_repo.insert(user_id, "Once", Category.EAT)
    first = await mutations.delete_task(user_id, task.id)

    second = await mutations.delete_task(user_id, task.id)

    assert first.affected == 1
    assert second.affected == 0
    assert not second.matched
    assert audit_actions(db) == ["DELETE_TASK"]


@pytest.mark.asyncio
async def test_edit_overwrites_description_and_bumps_timestamp(
    mutations: TaskMutationService, task_repo: TaskRepository, user_id: int,
) -> None:
    task = task_repo.insert(user_id, "Sushi", Category.EAT, last_modified=at(2020, 1, 1))

    result = await mutations.edit_description(user_id, task.id, "  Omakase  ")

    edited = result.rows[0]
    assert edited.description == "Omakase"
    assert edited.last_modified > task.last_modified


@pytest.mark.asyncio
async def test_blank_edit_is_rejected(
    mutations: TaskMutationService, task_repo: TaskRepository, user_id: int,
) -> None:
    task = task_repo.insert(user_id, "Sushi", Category.EAT)

    with pytest.raises(InvalidInputError):
        await mutations.edit_description(user_id, task.id, "")

    assert task_repo.list_by_user(user_id)[0].description == "Sushi"


@pytest.mark.asyncio
async def test_archive_hides_task_but_keeps_row(
    mutations: TaskMutationService,
    task_repo: TaskRepository,
    db: DatabaseManager,
    user_id: int,
) -> None:
    task = task_repo.insert(user_id, "Old film", Category.WATCH)

    result = await mutations.archive_task(user_id, task.id)

    assert result.rows[0].active is False
    assert task_repo.list_active_by_category(user_id, Category.WATCH) == []
    assert count_rows(db, "tasks") == 1
