"""Achievement awarding."""

from __future__ import annotations

from tycoon.achievements.service import check_achievements, list_achievements
from tycoon.context import GameContext
from tycoon.documents import UserQuest
from tycoon.store import keys


async def test_new_account_has_none(ctx: GameContext):
    assert await check_achievements(ctx, "alice") == []


async def test_first_transaction_awarded_once(ctx: GameContext, edit_account):
    await edit_account("alice", transactions=1)
    awarded = await check_achievements(ctx, "alice")
    assert [a.slug for a in awarded] == ["first-transaction"]
    assert await check_achievements(ctx, "alice") == []
    assert [a.slug for a in await list_achievements(ctx, "alice")] == ["first-transaction"]


async def test_millionaire(ctx: GameContext, edit_account):
    await edit_account("alice", btc_balance=1000)
    awarded = await check_achievements(ctx, "alice")
    assert [a.slug for a in awarded] == ["millionaire"]


async def test_quest_master_counts_completed_quests(ctx: GameContext):
    for i in range(5):
        status = "completed" if i < 4 else "accepted"
        quest = UserQuest(quest_id=f"q{i}", status=status)
        await ctx.store.put(keys.user_quest("alice", f"q{i}"), quest.model_dump(mode="json"))
    assert await check_achievements(ctx, "alice") == []

    await ctx.store.update(keys.user_quest("alice", "q4"), {"status": "completed"})
    awarded = await check_achievements(ctx, "alice")
    assert [a.slug for a in awarded] == ["quest-master"]
