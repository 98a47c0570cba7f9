"""
Task Model.

A task is a short text item owned by one user and filed under exactly one
:class:`~listify.models.enums.Category`.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from listify.models.enums import Category

# Display format of ``last_modified`` on the landing page (e.g. "Mar 04, 2026").
DISPLAY_DATE_FORMAT: str = "%b %d, %Y"


class Task(BaseModel):
    """Represents a row of the ``tasks`` table."""

    id: int
    user_id: int
    description: str
    category: Category
    last_modified: datetime
    active: bool = True

    model_config = {"from_attributes": True}

    @field_validator("active", mode="before")
    @classmethod
    def _coerce_sqlite_bool(cls, value: object) -> object:
        # SQLite stores booleans as 0/1.
        if isinstance(value, int):
            return bool(value)
        return value

    def to_view(self) -> "TaskView":
        return TaskView(
            id=self.id,
            description=self.description,
            category=self.category,
            last_modified=self.last_modified.strftime(DISPLAY_DATE_FORMAT),
        )


class TaskView(BaseModel):
    """A task as handed to the template: date already formatted."""

    id: int
    description: str
    category: Category
    last_modified: str
