"""
Base Service Classes.

``BaseService`` standardises the logger pattern.  ``StoreService`` adds
the bridge between the async request handlers and the synchronous
repositories: each unit of work runs in a worker thread, bounded by the
configured store timeout, optionally inside one transaction.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, TypeVar

from listify.database import CommitGuard, DatabaseManager
from listify.errors import StoreUnavailableError
from listify.logger import StructuredLogger

T = TypeVar("T")


class BaseService:
    """Base class for all service classes. Provides a logger."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger


class StoreService(BaseService):
    """Base class for services that talk to the store."""

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        store_timeout_s: float,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._store_timeout_s = store_timeout_s

    async def _read(self, func: Callable[..., T], *args: object) -> T:
        """Run a read-only repository call off the event loop."""
        return await self._dispatch(func, *args)

    async def _unit_of_work(self, func: Callable[..., T], *args: object) -> T:
        """Run *func* in a worker thread inside a single transaction.

        Any exception raised by *func* rolls back every statement it
        issued.  So does a timeout: the transaction is abandoned and the
        worker rolls back instead of committing once it finishes.
        """
        guard = CommitGuard()
        return await self._dispatch(self._in_transaction, guard, func, *args, guard=guard)

    def _in_transaction(self, guard: CommitGuard, func: Callable[..., T], *args: object) -> T:
        with self._db.transaction(guard):
            return func(*args)

    async def _dispatch(
        self,
        func: Callable[..., T],
        *args: object,
        guard: Optional[CommitGuard] = None,
    ) -> T:
        future = asyncio.ensure_future(asyncio.to_thread(func, *args))
        done, _ = await asyncio.wait({future}, timeout=self._store_timeout_s)
        if future in done:
            return future.result()

        if guard is not None and not guard.abandon():
            # Commit already claimed; wait for it.
            return await future

        future.add_done_callback(_discard_outcome)
        name = getattr(func, "__name__", repr(func))
        self._logger.error(
            "Store call %s exceeded %.1fs timeout.", name, self._store_timeout_s,
        )
        raise StoreUnavailableError(f"Store call {name} timed out")


def _discard_outcome(future: asyncio.Future[object]) -> None:
    """Retrieve the late result of an abandoned call so it is not reported."""
    if not future.cancelled():
        future.exception()
