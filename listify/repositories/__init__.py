"""
Repository Layer Package.

Data access over the SQLite store.  Every ``users`` and ``tasks``
statement lives here; services only hand the connection to the
audit helper.

Usage:
    from listify.repositories.task_repository import TaskRepository
    from listify.repositories.user_repository import UserRepository
"""

from listify.repositories.base_repository import BaseRepository
from listify.repositories.task_repository import TaskRepository
from listify.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "TaskRepository",
    "UserRepository",
]
