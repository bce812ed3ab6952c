"""Leaderboards."""

from __future__ import annotations

from tycoon.context import GameContext
from tycoon.leaderboard.service import richest_accounts, syndicate_standings
from tycoon.store import keys


async def test_richest_accounts_ranked_by_balance(ctx: GameContext, edit_account):
    await edit_account("alice", btc_balance=50, nickname="Alice")
    await edit_account("bob", btc_balance=500)
    await edit_account("carol", btc_balance=5)

    entries = await richest_accounts(ctx)
    assert [(e.rank, e.id) for e in entries] == [(1, "bob"), (2, "alice"), (3, "carol")]
    assert entries[1].name == "Alice"
    assert entries[0].name == "bob"

    assert [e.id for e in await richest_accounts(ctx, limit=1)] == ["bob"]


async def test_syndicate_standings(ctx: GameContext):
    await ctx.store.update(keys.syndicate("syndicate2"), {"progress": 42.0})
    entries = await syndicate_standings(ctx)
    assert [(e.rank, e.id, e.value) for e in entries] == [
        (1, "syndicate2", 42.0),
        (2, "syndicate1", 0.0),
    ]
