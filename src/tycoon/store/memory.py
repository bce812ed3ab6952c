"""In-process document store backed by a dict."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator, Sequence

from tycoon.errors import LostUpdate
from tycoon.store.base import MUST_NOT_EXIST, Document, DocumentStore, Write, is_direct_child


class InMemoryStore(DocumentStore):
    """Single-process store. Commits are serialised by one asyncio lock."""

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._lock = asyncio.Lock()
        self._subscribers: list[tuple[str, asyncio.Queue[Document]]] = []

    async def get(self, key: str) -> Document | None:
        doc = self._docs.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def commit(self, writes: Sequence[Write]) -> dict[str, int]:
        async with self._lock:
            for write in writes:
                current = self._docs.get(write.key)
                actual = current.version if current else MUST_NOT_EXIST
                if write.expected_version is not None and write.expected_version != actual:
                    raise LostUpdate(write.key, write.expected_version, actual)

            versions: dict[str, int] = {}
            changed: list[Document] = []
            for write in writes:
                current = self._docs.get(write.key)
                version = (current.version if current else 0) + 1
                if write.value is None:
                    self._docs.pop(write.key, None)
                else:
                    self._docs[write.key] = Document(write.key, copy.deepcopy(write.value), version)
                versions[write.key] = version
                changed.append(Document(write.key, copy.deepcopy(write.value), version))

        for doc in changed:
            for prefix, queue in self._subscribers:
                if doc.key.startswith(prefix):
                    queue.put_nowait(doc)
        return versions

    async def children(self, prefix: str) -> list[Document]:
        return [
            copy.deepcopy(self._docs[key])
            for key in sorted(self._docs)
            if is_direct_child(prefix, key)
        ]

    async def subscribe(self, prefix: str) -> AsyncIterator[Document]:
        queue: asyncio.Queue[Document] = asyncio.Queue()
        entry = (prefix, queue)
        self._subscribers.append(entry)
        try:
            while True:
                yield await queue.get()
        finally:
            self._subscribers.remove(entry)
