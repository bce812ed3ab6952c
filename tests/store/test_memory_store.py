"""In-memory document store: versions, atomic commits, children and subscriptions."""

from __future__ import annotations

import asyncio

import pytest

from tycoon.errors import LostUpdate, NotFound
from tycoon.store.base import MUST_NOT_EXIST, Write, is_direct_child, retry_on_conflict
from tycoon.store.memory import InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


class TestVersions:
    async def test_first_write_is_version_one(self, store: InMemoryStore):
        assert await store.put("accounts/a", {"btc": 1}) == 1
        doc = await store.get("accounts/a")
        assert doc is not None
        assert doc.version == 1
        assert doc.value == {"btc": 1}

    async def test_each_write_bumps_version(self, store: InMemoryStore):
        await store.put("accounts/a", {"btc": 1})
        assert await store.put("accounts/a", {"btc": 2}, expected_version=1) == 2

    async def test_stale_version_is_lost_update(self, store: InMemoryStore):
        await store.put("accounts/a", {"btc": 1})
        await store.put("accounts/a", {"btc": 2}, expected_version=1)
        with pytest.raises(LostUpdate):
            await store.put("accounts/a", {"btc": 3}, expected_version=1)
        doc = await store.get("accounts/a")
        assert doc.value == {"btc": 2}

    async def test_must_not_exist(self, store: InMemoryStore):
        await store.put("accounts/a", {"btc": 1}, expected_version=MUST_NOT_EXIST)
        with pytest.raises(LostUpdate):
            await store.put("accounts/a", {"btc": 9}, expected_version=MUST_NOT_EXIST)

    async def test_get_returns_a_copy(self, store: InMemoryStore):
        await store.put("accounts/a", {"items": []})
        doc = await store.get("accounts/a")
        doc.value["items"].append("x")
        assert (await store.get("accounts/a")).value == {"items": []}


class TestCommit:
    async def test_batch_is_all_or_nothing(self, store: InMemoryStore):
        await store.put("accounts/a", {"btc": 1})
        with pytest.raises(LostUpdate):
            await store.commit([
                Write("accounts/b", {"btc": 5}, MUST_NOT_EXIST),
                Write("accounts/a", {"btc": 0}, 7),
            ])
        assert await store.get("accounts/b") is None
        assert (await store.get("accounts/a")).value == {"btc": 1}

    async def test_update_merges_fields(self, store: InMemoryStore):
        await store.put("accounts/a", {"btc": 1, "usd": 2})
        await store.update("accounts/a", {"usd": 3})
        doc = await store.get("accounts/a")
        assert doc.value == {"btc": 1, "usd": 3}
        assert doc.version == 2

    async def test_update_missing_is_not_found(self, store: InMemoryStore):
        with pytest.raises(NotFound):
            await store.update("accounts/ghost", {"usd": 3})

    async def test_delete(self, store: InMemoryStore):
        await store.put("accounts/a", {"btc": 1})
        await store.delete("accounts/a", expected_version=1)
        assert await store.get("accounts/a") is None


class TestChildren:
    async def test_only_direct_children_in_key_order(self, store: InMemoryStore):
        await store.put("accounts/b", {})
        await store.put("accounts/a", {})
        await store.put("accounts/a/farms/f1", {})
        docs = await store.children("accounts/")
        assert [d.key for d in docs] == ["accounts/a", "accounts/b"]

    def test_is_direct_child(self):
        assert is_direct_child("accounts/", "accounts/a")
        assert not is_direct_child("accounts/", "accounts/a/farms/f1")
        assert not is_direct_child("accounts/", "accounts/")
        assert not is_direct_child("accounts/", "quests/a")


class TestSubscribe:
    async def test_subscriber_sees_matching_commits(self, store: InMemoryStore):
        stream = store.subscribe("market/")
        first = asyncio.ensure_future(anext(stream))
        await asyncio.sleep(0)

        await store.put("accounts/a", {"btc": 1})
        await store.put("market/price", {"price": 100})

        doc = await asyncio.wait_for(first, timeout=1)
        assert doc.key == "market/price"
        assert doc.version == 1
        await stream.aclose()


class TestRetryOnConflict:
    async def test_retries_until_success(self):
        calls = []

        async def flaky() -> str:
            calls.append(1)
            if len(calls) < 3:
                raise LostUpdate("k", 1, 2)
            return "ok"

        assert await retry_on_conflict(flaky, attempts=5) == "ok"
        assert len(calls) == 3

    async def test_gives_up_after_attempts(self):
        async def always() -> None:
            raise LostUpdate("k", 1, 2)

        with pytest.raises(LostUpdate):
            await retry_on_conflict(always, attempts=2)
