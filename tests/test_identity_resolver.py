# tests/test_identity_resolver.py

from __future__ import annotations

import pytest

from listify.database import DatabaseManager
from listify.errors import StoreUnavailableError
from listify.logger import StructuredLogger
from listify.models.enums import IdentityOrigin
from listify.repositories.user_repository import UserRepository
from listify.services.identity_resolver import IdentityResolverService

from .helpers import audit_actions, count_rows


@pytest.fixture()
def resolver(
    user_repo: UserRepository, db: DatabaseManager, logger: StructuredLogger,
) -> IdentityResolverService:
    return IdentityResolverService(repo=user_repo, db=db, logger=logger, store_timeout_s=5.0)


@pytest.mark.asyncio
async def test_absent_reference_creates_a_user_each_time(
    resolver: IdentityResolverService, db: DatabaseManager,
) -> None:
    first = await resolver.resolve(None)
    second = await resolver.resolve(None)

    assert first.origin == IdentityOrigin.CREATED
    assert second.origin == IdentityOrigin.CREATED
    assert first.user_id != second.user_id
    assert count_rows(db, "users") == 2
    assert audit_actions(db) == ["JIT_CREATE", "JIT_CREATE"]


@pytest.mark.asyncio
async def test_existing_reference_is_returned_unchanged(
    resolver: IdentityResolverService, user_repo: UserRepository, db: DatabaseManager,
) -> None:
    user = user_repo.create()

    resolved = await resolver.resolve(user.id)

    assert resolved.user_id == user.id
    assert resolved.origin == IdentityOrigin.EXISTING
    assert not resolved.created
    assert count_rows(db, "users") == 1


@pytest.mark.asyncio
async def test_stale_reference_is_replaced_and_flagged(
    resolver: IdentityResolverService, db: DatabaseManager,
) -> None:
    resolved = await resolver.resolve(987)

    assert resolved.user_id != 987
    assert resolved.origin == IdentityOrigin.REPLACED_STALE
    assert resolved.created
    assert count_rows(db, "users") == 1


@pytest.mark.asyncio
async def test_store_failure_propagates_without_insert(
    resolver: IdentityResolverService,
    user_repo: UserRepository,
    db: DatabaseManager,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_lookup(user_id: int) -> None:
        raise StoreUnavailableError("lookup failed")

    monkeypatch.setattr(user_repo, "get_by_id", broken_lookup)

    with pytest.raises(StoreUnavailableError):
        await resolver.resolve(1)

    assert count_rows(db, "users") == 0
