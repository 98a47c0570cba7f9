"""
Data Models Package.

Re-exports all Pydantic models:
    from listify.models import Task, User, Category
    from listify.models import CategoryView, MutationResult
"""

from __future__ import annotations

from listify.models.enums import Category, IdentityOrigin, SessionState
from listify.models.service_models import (
    CategoryView,
    MutationResult,
    NewTaskInput,
    ProfileUpdateInput,
    ProvisionedTask,
    ResolvedIdentity,
)
from listify.models.task import Task, TaskView
from listify.models.user import User, UserProfile

__all__ = [
    "Category",
    "CategoryView",
    "IdentityOrigin",
    "MutationResult",
    "NewTaskInput",
    "ProfileUpdateInput",
    "ProvisionedTask",
    "ResolvedIdentity",
    "SessionState",
    "Task",
    "TaskView",
    "User",
    "UserProfile",
]
