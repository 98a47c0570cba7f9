# tests/conftest.py

from __future__ import annotations

import os

# Must be set before listify reads its configuration.
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key")

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from listify.config import AppConfig
from listify.database import DatabaseManager
from listify.logger import StructuredLogger
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository
from listify.schema import initialize_schema
from listify.services import ServiceContainer, create_services
from listify.web import create_app


@pytest.fixture()
def logger() -> StructuredLogger:
    return StructuredLogger(name="listify.test")


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    """Configuration pointing at a per-test database, with cheap hashing."""
    return AppConfig(
        DATABASE_PATH=tmp_path / "listify.db",
        SESSION_SECRET_KEY="test-secret-key",
        STORE_TIMEOUT_S=5.0,
        PASSWORD_HASH_ITERATIONS=1_000,
        LOG_FILE="",
    )


@pytest.fixture()
def db(config: AppConfig, logger: StructuredLogger) -> Iterator[DatabaseManager]:
    """A real SQLite database with the current schema."""
    manager = DatabaseManager(sqlite_path=config.DATABASE_PATH, logger=logger)
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture()
def user_repo(db: DatabaseManager, logger: StructuredLogger) -> UserRepository:
    return UserRepository(db=db, logger=logger)


@pytest.fixture()
def task_repo(db: DatabaseManager, logger: StructuredLogger) -> TaskRepository:
    return TaskRepository(db=db, logger=logger)


@pytest.fixture()
def services(db: DatabaseManager, config: AppConfig) -> ServiceContainer:
    return create_services(db=db, config=config)


@pytest.fixture()
def client(
    config: AppConfig,
    db: DatabaseManager,
    services: ServiceContainer,
    logger: StructuredLogger,
) -> Iterator[TestClient]:
    """HTTP client that keeps the session cookie between requests.

    Redirects are not followed so tests can assert on them.
    """
    app = create_app(config=config, db=db, services=services, logger=logger)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
