"""Syndicate membership, contribution deltas, goal payout and chat."""

from __future__ import annotations

import pytest

from tycoon.context import GameContext
from tycoon.errors import AlreadyInState, NotEligible, NotFound
from tycoon.ledger.service import get_account
from tycoon.store import keys
from tycoon.syndicates.service import (
    check_goal,
    get_membership,
    get_syndicate,
    join,
    leave,
    list_messages,
    post_message,
    update_contribution,
)


class TestMembership:
    async def test_join(self, ctx: GameContext):
        membership = await join(ctx, "alice", "syndicate1")
        assert membership.syndicate_id == "syndicate1"
        assert (await get_syndicate(ctx, "syndicate1")).members == ["alice"]

    async def test_one_syndicate_per_account(self, ctx: GameContext):
        await join(ctx, "alice", "syndicate1")
        with pytest.raises(AlreadyInState):
            await join(ctx, "alice", "syndicate1")
        with pytest.raises(AlreadyInState):
            await join(ctx, "alice", "syndicate2")

    async def test_unknown_syndicate(self, ctx: GameContext):
        with pytest.raises(NotFound):
            await join(ctx, "alice", "syndicate99")

    async def test_leave_requires_membership(self, ctx: GameContext):
        with pytest.raises(NotEligible):
            await leave(ctx, "alice")

    async def test_leave_takes_contribution_back(self, ctx: GameContext, edit_account):
        await join(ctx, "alice", "syndicate1")
        await edit_account("alice", total_mined_btc=40)
        await update_contribution(ctx, "alice")
        assert (await get_syndicate(ctx, "syndicate1")).progress == 40

        await leave(ctx, "alice")
        syndicate = await get_syndicate(ctx, "syndicate1")
        assert syndicate.progress == 0
        assert syndicate.members == []
        assert (await get_membership(ctx, "alice")).syndicate_id == ""


class TestContribution:
    async def test_racing_contributions_both_land(self, ctx: GameContext, edit_account, monkeypatch):
        await join(ctx, "alice", "syndicate1")
        await join(ctx, "bob", "syndicate1")
        await edit_account("alice", total_mined_btc=30)
        await edit_account("bob", total_mined_btc=12)

        commit = ctx.store.commit
        raced = False

        async def commit_after_bob(writes):
            # bob's contribution lands between alice's read and her commit
            nonlocal raced
            if not raced and any(w.key == keys.syndicate("syndicate1") for w in writes):
                raced = True
                await update_contribution(ctx, "bob")
            return await commit(writes)

        monkeypatch.setattr(ctx.store, "commit", commit_after_bob)
        await update_contribution(ctx, "alice")

        assert raced
        assert (await get_syndicate(ctx, "syndicate1")).progress == 42
        assert (await get_membership(ctx, "alice")).contribution == 30
        assert (await get_membership(ctx, "bob")).contribution == 12

    async def test_only_growth_since_joining_counts(self, ctx: GameContext, edit_account):
        await edit_account("alice", total_mined_btc=100)
        await join(ctx, "alice", "syndicate1")
        await edit_account("alice", total_mined_btc=130)
        membership = await update_contribution(ctx, "alice")
        assert membership.contribution == 30
        assert (await get_syndicate(ctx, "syndicate1")).progress == 30

    async def test_deltas_not_double_counted(self, ctx: GameContext, edit_account):
        await join(ctx, "alice", "syndicate1")
        await edit_account("alice", total_mined_btc=10)
        await update_contribution(ctx, "alice")
        await update_contribution(ctx, "alice")
        await edit_account("alice", total_mined_btc=25)
        await update_contribution(ctx, "alice")
        assert (await get_syndicate(ctx, "syndicate1")).progress == 25

    async def test_goal_pays_every_member_once_and_resets(self, ctx: GameContext, edit_account):
        await join(ctx, "alice", "syndicate2")
        await join(ctx, "bob", "syndicate2")
        await edit_account("alice", total_mined_btc=300)
        await update_contribution(ctx, "alice")
        assert (await get_account(ctx, "alice")).btc_balance == 10

        await edit_account("bob", total_mined_btc=250)
        await update_contribution(ctx, "bob")

        for account_id in ("alice", "bob"):
            account = await get_account(ctx, account_id)
            assert account.btc_balance == 40
            assert account.mining_power == 10
            assert (await get_membership(ctx, account_id)).syndicate_id == ""
        syndicate = await get_syndicate(ctx, "syndicate2")
        assert syndicate.progress == 0
        assert syndicate.members == []

        assert await check_goal(ctx, "syndicate2") == []
        assert (await get_account(ctx, "alice")).btc_balance == 40


class TestChat:
    async def test_members_only(self, ctx: GameContext):
        with pytest.raises(NotEligible):
            await post_message(ctx, "alice", "hello")

    async def test_messages_in_posting_order(self, ctx: GameContext, clock):
        await join(ctx, "alice", "syndicate1")
        await post_message(ctx, "alice", "  first  ")
        clock.advance(seconds=1)
        await post_message(ctx, "alice", "second")
        messages = await list_messages(ctx, "syndicate1")
        assert [m.message for m in messages] == ["first", "second"]

    async def test_blank_message_rejected(self, ctx: GameContext):
        await join(ctx, "alice", "syndicate1")
        with pytest.raises(NotEligible):
            await post_message(ctx, "alice", "   ")
