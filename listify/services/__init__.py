"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the
``SessionManager`` for the identity bound to a request.

The ``create_services()`` factory wires every repository and service
together, returning a typed dict that the web layer consumes without
knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from listify.config import AppConfig
from listify.database import DatabaseManager
from listify.logger import get_logger
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository
from listify.services.category_view import CategoryViewService
from listify.services.identity_resolver import IdentityResolverService
from listify.services.task_mutations import TaskMutationService
from listify.services.task_provisioning import TaskProvisioningService
from listify.services.users import UserService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    identity_resolver: IdentityResolverService
    task_provisioning_service: TaskProvisioningService
    category_view_service: CategoryViewService
    task_mutation_service: TaskMutationService
    user_service: UserService


def create_services(db: DatabaseManager, config: AppConfig) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup.

    Args:
        db: Initialised DatabaseManager with the schema in place.
        config: Application configuration.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("listify.services")
    timeout: float = config.STORE_TIMEOUT_S

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    user_repo = UserRepository(db=db, logger=logger)
    task_repo = TaskRepository(db=db, logger=logger)

    # ------------------------------------------------------------------
    # 2. Leaf services (no service dependencies)
    # ------------------------------------------------------------------
    identity_resolver = IdentityResolverService(
        repo=user_repo,
        db=db,
        logger=logger,
        store_timeout_s=timeout,
    )
    category_view_service = CategoryViewService(
        user_repo=user_repo,
        task_repo=task_repo,
        db=db,
        logger=logger,
        store_timeout_s=timeout,
    )
    task_mutation_service = TaskMutationService(
        task_repo=task_repo,
        db=db,
        logger=logger,
        store_timeout_s=timeout,
    )
    user_service = UserService(
        repo=user_repo,
        db=db,
        logger=logger,
        store_timeout_s=timeout,
        password_hash_iterations=config.PASSWORD_HASH_ITERATIONS,
    )

    # ------------------------------------------------------------------
    # 3. Orchestration services (depend on other services)
    # ------------------------------------------------------------------
    task_provisioning_service = TaskProvisioningService(
        resolver=identity_resolver,
        task_repo=task_repo,
        db=db,
        logger=logger,
        store_timeout_s=timeout,
        default_category=config.DEFAULT_TASK_CATEGORY,
    )

    return ServiceContainer(
        identity_resolver=identity_resolver,
        task_provisioning_service=task_provisioning_service,
        category_view_service=category_view_service,
        task_mutation_service=task_mutation_service,
        user_service=user_service,
    )
