"""
User Model.

Pydantic model mirroring a row of the ``users`` table.  Lazily provisioned
users carry no profile data; every optional field stays ``None`` until the
user edits their profile.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Represents a user account.

    ``password`` holds an opaque credential hash, never plaintext.
    """

    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

    def to_profile(self) -> "UserProfile":
        return UserProfile(id=self.id, full_name=self.full_name)


class UserProfile(BaseModel):
    """The subset of a user exposed to the view renderer."""

    id: int
    full_name: Optional[str] = None
