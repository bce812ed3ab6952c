"""Unit of work and GameContext.transact."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from tycoon.context import GameContext
from tycoon.documents import Account
from tycoon.errors import LostUpdate, NotFound
from tycoon.store.memory import InMemoryStore
from tycoon.store.unit_of_work import UnitOfWork


class Counter(BaseModel):
    n: int = 0


async def test_load_twice_returns_same_object():
    store = InMemoryStore()
    await store.put("accounts/a", Account(id="a").model_dump(mode="json"))
    uow = UnitOfWork(store)
    first = await uow.load("accounts/a", Account)
    second = await uow.load("accounts/a", Account)
    assert first is second


async def test_mutation_after_save_is_committed():
    store = InMemoryStore()
    uow = UnitOfWork(store)
    account = Account(id="a")
    uow.save("accounts/a", account)
    account.btc_balance = 42
    await uow.commit()
    assert (await store.get("accounts/a")).value["btc_balance"] == 42


async def test_save_without_load_expects_missing_key():
    store = InMemoryStore()
    await store.put("accounts/a", Account(id="a").model_dump(mode="json"))
    uow = UnitOfWork(store)
    uow.save("accounts/a", Account(id="a", btc_balance=1))
    with pytest.raises(LostUpdate):
        await uow.commit()


async def test_require_missing_raises_not_found():
    uow = UnitOfWork(InMemoryStore())
    with pytest.raises(NotFound, match="Account x not found"):
        await uow.require("accounts/x", Account, what="Account x")


async def test_nothing_staged_commits_nothing():
    store = InMemoryStore()
    uow = UnitOfWork(store)
    await uow.load("accounts/a", Account)
    assert uow.pending == 0
    await uow.commit()
    assert await store.get("accounts/a") is None


class TestTransact:
    async def test_conflict_is_retried_against_fresh_state(self, ctx: GameContext):
        await ctx.store.put("counters/c", {"n": 0})
        attempts = []

        async def op(uow: UnitOfWork) -> int:
            attempts.append(1)
            current = await uow.load("counters/c", Counter)
            if len(attempts) == 1:
                # A concurrent writer lands between our read and our commit
                await ctx.store.put("counters/c", {"n": 10})
            current.n += 1
            uow.save("counters/c", current)
            return current.n

        assert await ctx.transact(op) == 11
        assert len(attempts) == 2
        assert (await ctx.store.get("counters/c")).value == {"n": 11}

    async def test_domain_error_writes_nothing(self, ctx: GameContext):
        async def op(uow: UnitOfWork) -> None:
            uow.save("counters/c", Counter(n=5))
            raise NotFound("nope")

        with pytest.raises(NotFound):
            await ctx.transact(op)
        assert await ctx.store.get("counters/c") is None

    async def test_account_lock_released(self, ctx: GameContext):
        async def op(uow: UnitOfWork) -> None:
            return None

        await ctx.transact(op, account_id="a")
        assert len(ctx.locks) == 0
