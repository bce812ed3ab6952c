"""Cyber Arena entry, reward flush and the live session loop."""

from __future__ import annotations

import asyncio
import random

import pytest

from tycoon.arena.engine import COMPLETE, FAILED, ArenaRun
from tycoon.arena.service import ArenaSessions, enter, flush_result, list_results
from tycoon.context import GameContext
from tycoon.documents import CompanionState, LootBundle
from tycoon.errors import AlreadyInState, InsufficientShards, NotEligible, NotFound
from tycoon.ledger.service import get_account
from tycoon.store import keys


class TestEnter:
    async def test_needs_shards(self, ctx: GameContext):
        with pytest.raises(InsufficientShards):
            await enter(ctx, "alice")

    async def test_entry_fee_and_cooldown(self, ctx: GameContext, clock, edit_neon):
        await edit_neon("alice", shards=25)
        state = await enter(ctx, "alice")
        assert state.shards == 15
        with pytest.raises(NotEligible):
            await enter(ctx, "alice")
        clock.advance(hours=24)
        assert (await enter(ctx, "alice")).shards == 5


class TestFlush:
    async def test_pays_accumulated_rewards(self, ctx: GameContext):
        run = ArenaRun(drone_rng=random.Random(1), power_up_rng=random.Random(1))
        run.phase = COMPLETE
        run.waves_completed = 3
        run.rewards = LootBundle(btc=80, shards=25, items=["SHADOW Core"])

        result = await flush_result(ctx, "alice", run)
        account = await get_account(ctx, "alice")
        assert result.outcome == "complete"
        assert account.btc_balance == 90
        assert account.items == ["SHADOW Core"]
        neon = await ctx.store.get(keys.neon("alice"))
        assert CompanionState.model_validate(neon.value).shards == 25
        assert [r.id for r in await list_results(ctx, "alice")] == [result.id]

    async def test_running_run_not_flushed(self, ctx: GameContext):
        run = ArenaRun(drone_rng=random.Random(1), power_up_rng=random.Random(1))
        with pytest.raises(NotEligible):
            await flush_result(ctx, "alice", run)


class TestSessions:
    async def test_run_loop_flushes_once_on_failure(self, ctx: GameContext, edit_neon):
        await edit_neon("alice", shards=10)
        sessions = ArenaSessions(ctx)
        run = await sessions.start("alice")
        assert "alice" in sessions
        with pytest.raises(AlreadyInState):
            await sessions.start("alice")

        run.select_bonus("hpRegen")
        run.start_wave()
        run.data_core_hp = 0
        result = await asyncio.wait_for(sessions.wait("alice"), timeout=5)

        assert result.outcome == "failed"
        assert run.phase == FAILED
        assert "alice" not in sessions
        with pytest.raises(NotFound):
            sessions.get("alice")
        assert len(await list_results(ctx, "alice")) == 1

    async def test_idle_run_is_abandoned(self, ctx: GameContext, edit_neon):
        ctx.settings.arena_idle_timeout_seconds = 0.3
        await edit_neon("alice", shards=10)
        sessions = ArenaSessions(ctx)
        await sessions.start("alice")
        result = await asyncio.wait_for(sessions.wait("alice"), timeout=5)
        assert result.outcome == "failed"
        assert result.waves_completed == 0

    async def test_stop_all_flushes_open_runs(self, ctx: GameContext, edit_neon):
        await edit_neon("alice", shards=10)
        sessions = ArenaSessions(ctx)
        await sessions.start("alice")
        await sessions.stop_all()
        results = await list_results(ctx, "alice")
        assert [r.outcome for r in results] == ["failed"]
        assert "alice" not in sessions
