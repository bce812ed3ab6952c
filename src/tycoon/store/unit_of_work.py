"""Read-modify-write helper that turns loaded models into one atomic commit."""

from __future__ import annotations

from typing import TypeVar, cast

from pydantic import BaseModel

from tycoon.errors import NotFound
from tycoon.store.base import MUST_NOT_EXIST, DocumentStore, Write

M = TypeVar("M", bound=BaseModel)


class UnitOfWork:
    """Tracks the version of every document read and stages writes against it.

    A staged write expects the version that was read; a key that was never
    read is expected not to exist. Loading a key twice returns the same
    object, so changes made through one reference are seen by the other.
    ``commit`` sends everything in one batch, so either all staged changes
    land or none do.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._versions: dict[str, int] = {}
        self._identity: dict[str, BaseModel | None] = {}
        self._writes: dict[str, Write] = {}
        self._staged: dict[str, BaseModel] = {}

    async def load(self, key: str, model: type[M]) -> M | None:
        if key in self._staged:
            return cast(M, self._staged[key])
        if key in self._identity:
            return cast("M | None", self._identity[key])
        doc = await self.store.get(key)
        if doc is None or doc.value is None:
            self._versions[key] = MUST_NOT_EXIST
            self._identity[key] = None
            return None
        self._versions[key] = doc.version
        obj = model.model_validate(doc.value)
        self._identity[key] = obj
        return obj

    async def require(self, key: str, model: type[M], what: str | None = None) -> M:
        obj = await self.load(key, model)
        if obj is None:
            raise NotFound(f"{what or key} not found")
        return obj

    async def load_children(self, prefix: str, model: type[M]) -> list[M]:
        docs = await self.store.children(prefix)
        items: list[M] = []
        for doc in docs:
            if doc.key in self._identity and self._identity[doc.key] is not None:
                items.append(cast(M, self._identity[doc.key]))
                continue
            obj = model.model_validate(doc.value)
            self._versions[doc.key] = doc.version
            self._identity[doc.key] = obj
            items.append(obj)
        return items

    def save(self, key: str, obj: BaseModel) -> None:
        expected = self._versions.get(key, MUST_NOT_EXIST)
        self._staged[key] = obj
        self._writes[key] = Write(key, obj.model_dump(mode="json"), expected)

    def delete(self, key: str) -> None:
        expected = self._versions.get(key)
        self._staged.pop(key, None)
        self._writes[key] = Write(key, None, expected)

    @property
    def pending(self) -> int:
        return len(self._writes)

    async def commit(self) -> None:
        if not self._writes:
            return
        # Re-serialise at commit time so mutations made after save() are included
        writes = [
            Write(key, self._staged[key].model_dump(mode="json"), write.expected_version)
            if key in self._staged
            else write
            for key, write in self._writes.items()
        ]
        versions = await self.store.commit(writes)
        self._versions.update(versions)
        self._writes.clear()
        self._staged.clear()
