"""Shared collaborators handed to every service function."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from tycoon.clock import Clock, SystemClock
from tycoon.config import Settings, get_settings
from tycoon.locks import AccountLocks
from tycoon.rng import RandomSource
from tycoon.store.base import DocumentStore, retry_on_conflict
from tycoon.store.memory import InMemoryStore
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class GameContext:
    """Store, clock, randomness and settings for one running game."""

    store: DocumentStore
    settings: Settings = field(default_factory=get_settings)
    clock: Clock = field(default_factory=SystemClock)
    rng: RandomSource = field(default_factory=RandomSource)
    locks: AccountLocks = field(default_factory=AccountLocks)

    async def transact(
        self,
        fn: Callable[[UnitOfWork], Awaitable[T]],
        *,
        account_id: str | None = None,
    ) -> T:
        """Run ``fn`` against a fresh unit of work and commit what it staged.

        A LostUpdate on commit re-runs ``fn`` from scratch, up to
        ``store_max_retries`` times. Any other exception from ``fn`` aborts
        without writing anything. With ``account_id`` the whole attempt
        loop runs under that account's lock.
        """

        async def attempt() -> T:
            uow = UnitOfWork(self.store)
            result = await fn(uow)
            await uow.commit()
            return result

        if account_id is None:
            return await retry_on_conflict(attempt, attempts=self.settings.store_max_retries)
        async with self.locks.hold(account_id):
            return await retry_on_conflict(attempt, attempts=self.settings.store_max_retries)


def create_context(settings: Settings | None = None) -> GameContext:
    """Build a context with the store backend named in settings."""
    settings = settings or get_settings()
    rng = RandomSource(settings.random_seed)
    if settings.store_backend == "sql":
        from tycoon.database import get_session_factory
        from tycoon.redis_client import get_redis_or_none
        from tycoon.store.sql import SqlDocumentStore

        store: DocumentStore = SqlDocumentStore(get_session_factory(), get_redis_or_none())
    else:
        store = InMemoryStore()
    logger.info("Game context created (store=%s)", settings.store_backend)
    return GameContext(store=store, settings=settings, rng=rng)
