"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries.
Replaces raw dict passing between the web layer and the services.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from listify.models.enums import Category, IdentityOrigin
from listify.models.task import Task, TaskView
from listify.models.user import UserProfile

T = TypeVar("T")

__all__ = [
    "CategoryView",
    "MutationResult",
    "NewTaskInput",
    "ProfileUpdateInput",
    "ProvisionedTask",
    "ResolvedIdentity",
]


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------

class NewTaskInput(BaseModel):
    """Validated description of a task about to be created or edited."""

    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(min_length=1, max_length=500)


class ProfileUpdateInput(BaseModel):
    """Validated profile fields.  ``password`` is plaintext until hashed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: Optional[str] = Field(default=None, min_length=8, max_length=256)


# ---------------------------------------------------------------------------
# Output models
# ---------------------------------------------------------------------------

class ResolvedIdentity(BaseModel):
    """Outcome of the Identity Resolver."""

    user_id: int
    origin: IdentityOrigin

    @property
    def created(self) -> bool:
        return self.origin != IdentityOrigin.EXISTING


class ProvisionedTask(BaseModel):
    """Outcome of the task provisioning workflow."""

    identity: ResolvedIdentity
    task: Task
    task_count: int


class MutationResult(BaseModel, Generic[T]):
    """Rows affected by a single-statement mutation.

    An empty ``rows`` list means nothing matched; it is a no-op, not an
    error.  Store failures never produce a ``MutationResult``.
    """

    rows: list[T] = Field(default_factory=list)

    @property
    def affected(self) -> int:
        return len(self.rows)

    @property
    def matched(self) -> bool:
        return bool(self.rows)


class CategoryView(BaseModel):
    """Profile plus the active tasks of every category, newest first."""

    profile: Optional[UserProfile] = None
    tasks_by_category: dict[Category, list[TaskView]] = Field(
        default_factory=lambda: {category: [] for category in Category}
    )

    @property
    def is_anonymous(self) -> bool:
        return self.profile is None

    def to_template_context(self) -> dict[str, object]:
        """Flatten into the keys the ``index.html`` template reads."""
        context: dict[str, object] = {"user": self.profile}
        for category in Category:
            context[category.list_key] = self.tasks_by_category.get(category, [])
        return context
