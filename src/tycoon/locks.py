"""Per-account mutual exclusion.

Every command that mutates one account runs while holding that account's
lock, so two requests for the same player are applied one after the other.
Cross-account writes (payouts to syndicate members) do not take locks; they
rely on versioned commits instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class AccountLocks:
    """Lazily created asyncio locks keyed by account id."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, account_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        self._waiters[account_id] = self._waiters.get(account_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[account_id] -= 1
            if self._waiters[account_id] == 0:
                # Nobody else is queued; drop the lock so the registry stays small
                del self._waiters[account_id]
                del self._locks[account_id]

    def __len__(self) -> int:
        return len(self._locks)
