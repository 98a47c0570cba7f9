# tests/test_task_provisioning.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from listify.auth import SESSION_USER_KEY, SessionManager
from listify.database import DatabaseManager
from listify.errors import ConflictError, InvalidInputError, StoreUnavailableError
from listify.logger import StructuredLogger
from listify.models.enums import Category, IdentityOrigin, SessionState
from listify.models.task import Task
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository
from listify.services.identity_resolver import IdentityResolverService
from listify.services.task_provisioning import TaskProvisioningService

from .helpers import audit_actions, count_rows


def _build(
    user_repo: UserRepository,
    task_repo: TaskRepository,
    db: DatabaseManager,
    logger: StructuredLogger,
    default_category: Category = Category.EAT,
) -> TaskProvisioningService:
    resolver = IdentityResolverService(repo=user_repo, db=db, logger=logger, store_timeout_s=5.0)
    return TaskProvisioningService(
        resolver=resolver,
        task_repo=task_repo,
        db=db,
        logger=logger,
        store_timeout_s=5.0,
        default_category=default_category,
    )


@pytest.fixture()
def provisioning(
    user_repo: UserRepository,
    task_repo: TaskRepository,
    db: DatabaseManager,
    logger: StructuredLogger,
) -> TaskProvisioningService:
    return _build(user_repo, task_repo, db, logger)


@pytest.mark.asyncio
async def test_fresh_session_gets_a_user_and_an_eat_task(
    provisioning: TaskProvisioningService,
    task_repo: TaskRepository,
    db: DatabaseManager,
) -> None:
    session = SessionManager({})
    started = datetime.now(timezone.utc)

    result = await provisioning.provision_task(session, "Buy milk")

    finished = datetime.now(timezone.utc)
    tasks = task_repo.list_by_user(result.identity.user_id)
    assert len(tasks) == 1
    task = tasks[0]
    assert task.category == Category.EAT
    assert task.description == "Buy milk"
    assert task.active
    assert started <= task.last_modified <= finished

    assert result.identity.origin == IdentityOrigin.CREATED
    assert result.task_count == 1
    assert session.user_id == result.identity.user_id
    assert session.state == SessionState.AUTHENTICATED
    assert count_rows(db, "users") == 1
    assert audit_actions(db) == ["JIT_CREATE", "CREATE_TASK"]


@pytest.mark.asyncio
async def test_authenticated_session_reuses_its_user(
    provisioning: TaskProvisioningService,
    user_repo: UserRepository,
    db: DatabaseManager,
) -> None:
    user = user_repo.create()
    session = SessionManager({SESSION_USER_KEY: user.id})

    first = await provisioning.provision_task(session, "Ramen")
    second = await provisioning.provision_task(session, "Tacos")

    assert first.identity.user_id == second.identity.user_id == user.id
    assert second.identity.origin == IdentityOrigin.EXISTING
    assert second.task_count == 2
    assert count_rows(db, "users") == 1


@pytest.mark.asyncio
async def test_default_category_is_configurable(
    user_repo: UserRepository,
    task_repo: TaskRepository,
    db: DatabaseManager,
    logger: StructuredLogger,
) -> None:
    service = _build(user_repo, task_repo, db, logger, default_category=Category.READ)

    result = await service.provision_task(SessionManager({}), "Dune")

    assert result.task.category == Category.READ


@pytest.mark.asyncio
async def test_blank_description_is_rejected_before_store_access(
    provisioning: TaskProvisioningService, db: DatabaseManager,
) -> None:
    session = SessionManager({})

    with pytest.raises(InvalidInputError):
        await provisioning.provision_task(session, "   ")

    assert count_rows(db, "users") == 0
    assert session.state == SessionState.ANONYMOUS


@pytest.mark.asyncio
async def test_failed_reread_rolls_back_user_and_task(
    provisioning: TaskProvisioningService,
    task_repo: TaskRepository,
    db: DatabaseManager,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_reread(user_id: int) -> list[Task]:
        raise StoreUnavailableError("re-read failed")

    monkeypatch.setattr(task_repo, "list_by_user", broken_reread)
    session = SessionManager({})

    with pytest.raises(StoreUnavailableError):
        await provisioning.provision_task(session, "Buy milk")

    assert count_rows(db, "users") == 0
    assert count_rows(db, "tasks") == 0
    assert count_rows(db, "audit_log") == 0
    assert session.user_id is None
    assert session.state == SessionState.ANONYMOUS


@pytest.mark.asyncio
async def test_task_missing_from_reread_is_a_conflict(
    provisioning: TaskProvisioningService,
    user_repo: UserRepository,
    task_repo: TaskRepository,
    db: DatabaseManager,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    user = user_repo.create()
    monkeypatch.setattr(task_repo, "list_by_user", lambda user_id: [])
    session = SessionManager({SESSION_USER_KEY: user.id})

    with pytest.raises(ConflictError):
        await provisioning.provision_task(session, "Ghost")

    assert count_rows(db, "tasks") == 0
    assert session.user_id == user.id
    assert session.state == SessionState.AUTHENTICATED
