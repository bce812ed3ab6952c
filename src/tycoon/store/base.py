"""Versioned document store interface.

Documents are JSON objects addressed by hierarchical keys such as
``accounts/{id}`` or ``accounts/{id}/farms/{farm_id}``. Every document has a
version that starts at 1 and increases by one on each write. Writers state
the version they read; a mismatch raises LostUpdate instead of silently
overwriting a concurrent change.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from tycoon.errors import LostUpdate, NotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")

# expected_version sentinel meaning "the document must not exist yet"
MUST_NOT_EXIST = 0


@dataclass(frozen=True)
class Document:
    key: str
    value: dict[str, Any] | None  # None for a deletion event
    version: int


@dataclass(frozen=True)
class Write:
    """One element of an atomic commit. ``value=None`` deletes the key.

    ``expected_version=None`` writes unconditionally (last write wins).
    """

    key: str
    value: dict[str, Any] | None
    expected_version: int | None = None


def is_direct_child(prefix: str, key: str) -> bool:
    """True if key sits exactly one level below prefix (``prefix`` ends with '/')."""
    if not key.startswith(prefix):
        return False
    rest = key[len(prefix):]
    return bool(rest) and "/" not in rest


class DocumentStore(ABC):
    """Generic persistent store: get / put / update / subscribe plus atomic commits."""

    @abstractmethod
    async def get(self, key: str) -> Document | None:
        """Return the document or None if the key does not exist."""

    @abstractmethod
    async def commit(self, writes: Sequence[Write]) -> dict[str, int]:
        """Apply all writes atomically. Returns the new version per key.

        Raises LostUpdate (and applies nothing) if any expected version
        does not match.
        """

    @abstractmethod
    async def children(self, prefix: str) -> list[Document]:
        """Documents exactly one level below ``prefix``, ordered by key."""

    @abstractmethod
    def subscribe(self, prefix: str) -> AsyncIterator[Document]:
        """Stream every committed change whose key starts with ``prefix``."""

    async def put(self, key: str, value: dict[str, Any], expected_version: int | None = None) -> int:
        versions = await self.commit([Write(key, value, expected_version)])
        return versions[key]

    async def update(self, key: str, fields: dict[str, Any], expected_version: int | None = None) -> int:
        """Merge ``fields`` into an existing document."""
        current = await self.get(key)
        if current is None or current.value is None:
            raise NotFound(f"Document {key} not found")
        if expected_version is not None and expected_version != current.version:
            raise LostUpdate(key, expected_version, current.version)
        merged = {**current.value, **fields}
        return await self.put(key, merged, expected_version=current.version)

    async def delete(self, key: str, expected_version: int | None = None) -> None:
        await self.commit([Write(key, None, expected_version)])

    async def close(self) -> None:
        """Release backend resources."""


async def retry_on_conflict(fn: Callable[[], Awaitable[T]], *, attempts: int) -> T:
    """Re-run ``fn`` when it raises LostUpdate, up to ``attempts`` times."""
    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except LostUpdate as exc:
            if attempt >= attempts:
                logger.warning("Giving up after %d conflicting attempts on %s", attempt, exc.key)
                raise
            logger.info("Conflict on %s (attempt %d/%d), retrying", exc.key, attempt, attempts)
    raise AssertionError("unreachable")
