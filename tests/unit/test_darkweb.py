"""Darkweb market purchases and the Darkweb Heist event."""

from __future__ import annotations

import pytest

from tycoon.context import GameContext
from tycoon.darkweb.service import (
    claim_rewards,
    contribute_btc,
    ensure_event,
    join_event,
    list_active_events,
    list_items,
    purchase,
    record_robbery,
)
from tycoon.documents import CompanionState
from tycoon.errors import AlreadyInState, InsufficientFunds, NotEligible, NotFound
from tycoon.ledger.service import get_account
from tycoon.store import keys


class TestMarket:
    async def test_seeded_catalogue(self, ctx: GameContext):
        items = await list_items(ctx)
        assert {item.id for item in items} == {"decryptor", "quantum-miner", "contractor-bribe"}

    async def test_purchase_needs_funds(self, ctx: GameContext):
        with pytest.raises(InsufficientFunds):
            await purchase(ctx, "alice", "decryptor")

    async def test_mining_power_item(self, ctx: GameContext, edit_account):
        await edit_account("alice", btc_balance=100)
        await purchase(ctx, "alice", "decryptor")
        account = await get_account(ctx, "alice")
        assert account.btc_balance == 75
        assert account.mining_power == 5
        assert account.items == ["Decryptor"]

    async def test_build_cost_item(self, ctx: GameContext, edit_account):
        await edit_account("alice", btc_balance=100)
        await purchase(ctx, "alice", "contractor-bribe")
        account = await get_account(ctx, "alice")
        assert account.build_cost_multiplier == pytest.approx(0.9)

    async def test_unknown_item(self, ctx: GameContext):
        with pytest.raises(NotFound):
            await purchase(ctx, "alice", "moon-rocket")


async def _complete_robberies(ctx: GameContext, count: int = 10) -> None:
    for _ in range(count):
        await ctx.transact(lambda uow: record_robbery(uow, ctx.clock.now()))


class TestEvents:
    async def test_ensure_event_opens_once_per_period(self, ctx: GameContext, clock):
        first = await ensure_event(ctx)
        assert first.id == "event_000001"
        assert (await ensure_event(ctx)).id == "event_000001"

        clock.advance(hours=25)
        assert await list_active_events(ctx) == []
        assert (await ensure_event(ctx)).id == "event_000002"

    async def test_join_twice(self, ctx: GameContext):
        event = await ensure_event(ctx)
        await join_event(ctx, "alice", event.id)
        with pytest.raises(AlreadyInState):
            await join_event(ctx, "alice", event.id)

    async def test_contribution_requires_joining(self, ctx: GameContext):
        event = await ensure_event(ctx)
        with pytest.raises(NotEligible):
            await contribute_btc(ctx, "alice", event.id, 5)

    async def test_contribution_capped_at_target(self, ctx: GameContext, edit_account):
        await edit_account("alice", btc_balance=1000)
        event = await ensure_event(ctx)
        await join_event(ctx, "alice", event.id)

        event = await contribute_btc(ctx, "alice", event.id, 600)
        assert event.tasks[0].progress == 500
        assert (await get_account(ctx, "alice")).btc_balance == 500
        with pytest.raises(AlreadyInState):
            await contribute_btc(ctx, "alice", event.id, 1)

    async def test_robberies_stop_at_target(self, ctx: GameContext):
        await ensure_event(ctx)
        await _complete_robberies(ctx, 12)
        [event] = await list_active_events(ctx)
        assert event.tasks[1].progress == 10

    async def test_claim_flow(self, ctx: GameContext, edit_account):
        await edit_account("alice", btc_balance=1000)
        event = await ensure_event(ctx)
        await join_event(ctx, "alice", event.id)
        await contribute_btc(ctx, "alice", event.id, 500)

        with pytest.raises(NotEligible):
            await claim_rewards(ctx, "alice", event.id)

        await _complete_robberies(ctx)
        rewards = await claim_rewards(ctx, "alice", event.id)
        assert rewards.btc == 200

        account = await get_account(ctx, "alice")
        assert account.btc_balance == 700
        assert "Darkweb Key" in account.items
        neon = await ctx.store.get(keys.neon("alice"))
        assert CompanionState.model_validate(neon.value).shards == 20

        with pytest.raises(AlreadyInState):
            await claim_rewards(ctx, "alice", event.id)
        with pytest.raises(NotEligible):
            await claim_rewards(ctx, "bob", event.id)

    async def test_expired_event_rejects_joins(self, ctx: GameContext, clock):
        event = await ensure_event(ctx)
        clock.advance(hours=24)
        with pytest.raises(NotEligible):
            await join_event(ctx, "alice", event.id)
