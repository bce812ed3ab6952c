"""SQL document store on sqlite+aiosqlite."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio

from tycoon.database import close_db, get_session_factory, init_db
from tycoon.errors import LostUpdate
from tycoon.store.base import MUST_NOT_EXIST, Write
from tycoon.store.sql import SqlDocumentStore


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> AsyncGenerator[SqlDocumentStore, None]:
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'tycoon.db'}", create_tables=True)
    yield SqlDocumentStore(get_session_factory())
    await close_db()


async def test_put_get_roundtrip(store: SqlDocumentStore):
    await store.put("accounts/a", {"btc": 1.5, "items": ["x"]})
    doc = await store.get("accounts/a")
    assert doc is not None
    assert doc.value == {"btc": 1.5, "items": ["x"]}
    assert doc.version == 1


async def test_versioned_update(store: SqlDocumentStore):
    await store.put("accounts/a", {"btc": 1})
    assert await store.put("accounts/a", {"btc": 2}, expected_version=1) == 2
    with pytest.raises(LostUpdate):
        await store.put("accounts/a", {"btc": 3}, expected_version=1)
    assert (await store.get("accounts/a")).value == {"btc": 2}


async def test_must_not_exist(store: SqlDocumentStore):
    await store.put("accounts/a", {"btc": 1}, expected_version=MUST_NOT_EXIST)
    with pytest.raises(LostUpdate):
        await store.put("accounts/a", {"btc": 1}, expected_version=MUST_NOT_EXIST)


async def test_failed_batch_rolls_back(store: SqlDocumentStore):
    await store.put("accounts/a", {"btc": 1})
    with pytest.raises(LostUpdate):
        await store.commit([
            Write("accounts/b", {"btc": 5}, MUST_NOT_EXIST),
            Write("accounts/a", {"btc": 0}, 3),
        ])
    assert await store.get("accounts/b") is None


async def test_children_and_delete(store: SqlDocumentStore):
    await store.put("accounts/a", {})
    await store.put("accounts/a/farms/f1", {"level": 1})
    await store.put("accounts/a/farms/f2", {"level": 2})
    docs = await store.children("accounts/a/farms/")
    assert [d.key for d in docs] == ["accounts/a/farms/f1", "accounts/a/farms/f2"]

    await store.delete("accounts/a/farms/f1")
    docs = await store.children("accounts/a/farms/")
    assert [d.key for d in docs] == ["accounts/a/farms/f2"]


async def test_subscribe_needs_redis(store: SqlDocumentStore):
    with pytest.raises(RuntimeError, match="Redis"):
        await anext(store.subscribe("accounts/"))
