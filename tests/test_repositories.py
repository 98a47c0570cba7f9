# tests/test_repositories.py

from __future__ import annotations

import pytest

from listify.database import DatabaseManager
from listify.errors import ConflictError, InvalidInputError
from listify.logger import StructuredLogger
from listify.models.enums import Category
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository
from listify.schema import CURRENT_SCHEMA_VERSION, initialize_schema

from .helpers import at, count_rows


def test_schema_initialisation_is_idempotent(db: DatabaseManager, logger: StructuredLogger) -> None:
    initialize_schema(db.sqlite, logger)
    initialize_schema(db.sqlite, logger)

    version = db.sqlite.execute("SELECT version FROM schema_version").fetchone()[0]
    assert version == CURRENT_SCHEMA_VERSION
    assert count_rows(db, "schema_version") == 1


def test_created_user_has_empty_profile(user_repo: UserRepository) -> None:
    user = user_repo.create()

    assert user.id > 0
    assert user.full_name is None
    assert user.email is None
    assert user.password is None
    assert user_repo.get_by_id(user.id) == user


def test_get_by_id_missing_returns_none(user_repo: UserRepository) -> None:
    assert user_repo.get_by_id(424242) is None


def test_task_for_unknown_user_is_a_conflict(task_repo: TaskRepository, db: DatabaseManager) -> None:
    with pytest.raises(ConflictError) as excinfo:
        task_repo.insert(user_id=999, description="Orphan", category=Category.EAT)

    assert excinfo.value.original_error is not None
    assert count_rows(db, "tasks") == 0


def test_active_tasks_are_ordered_newest_first(
    user_repo: UserRepository, task_repo: TaskRepository,
) -> None:
    user = user_repo.create()
    task_repo.insert(user.id, "Old", Category.BUY, last_modified=at(2026, 1, 1))
    task_repo.insert(user.id, "New", Category.BUY, last_modified=at(2026, 3, 1))
    task_repo.insert(user.id, "Middle", Category.BUY, last_modified=at(2026, 2, 1))
    task_repo.insert(user.id, "Hidden", Category.BUY, last_modified=at(2026, 4, 1), active=False)
    task_repo.insert(user.id, "Other list", Category.READ)

    tasks = task_repo.list_active_by_category(user.id, Category.BUY)

    assert [t.description for t in tasks] == ["New", "Middle", "Old"]
    assert all(t.active for t in tasks)


def test_writes_are_scoped_to_the_owner(
    user_repo: UserRepository, task_repo: TaskRepository,
) -> None:
    owner = user_repo.create()
    intruder = user_repo.create()
    task = task_repo.insert(owner.id, "Mine", Category.WATCH)

    assert task_repo.update_description(intruder.id, task.id, "Yours") == []
    assert task_repo.delete(intruder.id, task.id) == []
    assert task_repo.list_by_user(owner.id)[0].description == "Mine"


def test_deleting_a_user_cascades_to_tasks(
    user_repo: UserRepository, task_repo: TaskRepository, db: DatabaseManager,
) -> None:
    user = user_repo.create()
    task_repo.insert(user.id, "One", Category.EAT)
    task_repo.insert(user.id, "Two", Category.READ)

    deleted = user_repo.delete(user.id)

    assert [u.id for u in deleted] == [user.id]
    assert count_rows(db, "tasks") == 0


def test_update_profile_keeps_fields_left_blank(user_repo: UserRepository) -> None:
    user = user_repo.create()
    user_repo.update_profile(user.id, full_name="Ada", email="ada@example.org", password_hash=None)

    rows = user_repo.update_profile(user.id, full_name=None, email="ada@lovelace.org", password_hash=None)

    assert rows[0].full_name == "Ada"
    assert rows[0].email == "ada@lovelace.org"


def test_id_beyond_sqlite_integer_range_is_invalid_input(
    user_repo: UserRepository, task_repo: TaskRepository,
) -> None:
    user = user_repo.create()
    task_repo.insert(user.id, "Tea", Category.BUY)

    with pytest.raises(InvalidInputError):
        task_repo.delete(user.id, 2**64)
    with pytest.raises(InvalidInputError):
        user_repo.get_by_id(2**64)

    assert len(task_repo.list_by_user(user.id)) == 1
