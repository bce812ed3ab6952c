"""Cyber Arena entry, result persistence and the per-run tick loop."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import timedelta

from tycoon.arena.engine import COMPLETE, PREPARATION, ArenaRun
from tycoon.companion.service import add_message, load_state
from tycoon.context import GameContext
from tycoon.documents import ArenaResult, CompanionState
from tycoon.errors import AlreadyInState, InsufficientShards, NotEligible, NotFound
from tycoon.ledger.service import grant_item, load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


async def enter(ctx: GameContext, account_id: str) -> CompanionState:
    """Pay the entry fee and start the arena cooldown."""
    settings = ctx.settings

    async def op(uow: UnitOfWork) -> CompanionState:
        now = ctx.clock.now()
        state = await load_state(uow, account_id)
        if state.cyber_arena_cooldown is not None and now < state.cyber_arena_cooldown:
            raise NotEligible(f"Cyber Arena is on cooldown until {state.cyber_arena_cooldown.isoformat()}")
        if state.shards < settings.arena_entry_shards:
            raise InsufficientShards(f"You need {settings.arena_entry_shards} NEON Shards to enter the Cyber Arena")
        state.shards -= settings.arena_entry_shards
        state.cyber_arena_cooldown = now + timedelta(hours=settings.arena_cooldown_hours)
        uow.save(keys.neon(account_id), state)
        add_message(
            uow, account_id, now,
            "Welcome to the Cyber Arena, human! Choose a bonus before the battle begins!", "reaction",
        )
        return state

    return await ctx.transact(op, account_id=account_id)


async def flush_result(ctx: GameContext, account_id: str, run: ArenaRun) -> ArenaResult:
    """Persist a finished run and pay its accumulated rewards in one commit."""
    if not run.is_terminal:
        raise NotEligible("Arena run is still in progress")

    async def op(uow: UnitOfWork) -> ArenaResult:
        now = ctx.clock.now()
        account = await load_account(ctx, uow, account_id)
        state = await load_state(uow, account_id)
        account.btc_balance += run.rewards.btc
        for item in run.rewards.items:
            grant_item(account, item)
        state.shards += run.rewards.shards

        result = ArenaResult(
            id=uuid.uuid4().hex,
            waves_completed=run.waves_completed,
            rewards=run.rewards,
            outcome="complete" if run.phase == COMPLETE else "failed",
            timestamp=now,
        )
        uow.save(keys.account(account_id), account)
        uow.save(keys.neon(account_id), state)
        uow.save(f"{keys.arena_results(account_id)}{now:%Y%m%d%H%M%S%f}-{result.id[:8]}", result)
        for text in run.events[-3:]:
            add_message(uow, account_id, now, text, "reaction")
        return result

    result = await ctx.transact(op, account_id=account_id)
    logger.info(
        "Arena run of account %s ended %s after %d waves (%g BTC, %d shards)",
        account_id, result.outcome, result.waves_completed, result.rewards.btc, result.rewards.shards,
    )
    return result


async def list_results(ctx: GameContext, account_id: str) -> list[ArenaResult]:
    docs = await ctx.store.children(keys.arena_results(account_id))
    return [ArenaResult.model_validate(doc.value) for doc in reversed(docs)]


class ArenaSessions:
    """In-process registry of live runs, one asyncio tick loop per run."""

    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self._runs: dict[str, ArenaRun] = {}
        self._tasks: dict[str, asyncio.Task[ArenaResult | None]] = {}

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._runs

    def get(self, account_id: str) -> ArenaRun:
        run = self._runs.get(account_id)
        if run is None:
            raise NotFound("No active arena run")
        return run

    async def start(self, account_id: str) -> ArenaRun:
        if account_id in self._runs:
            raise AlreadyInState("You are already in the Cyber Arena")
        state = await enter(self.ctx, account_id)
        run = ArenaRun(
            drone_rng=self.ctx.rng.stream("arena.drones"),
            power_up_rng=self.ctx.rng.stream("arena.power_ups"),
            unlocked_bonuses=frozenset(state.unlocked_bonuses),
            tick_seconds=self.ctx.settings.arena_tick_seconds,
        )
        self._runs[account_id] = run
        self._tasks[account_id] = asyncio.create_task(self._loop(account_id, run))
        logger.info("Arena run started for account %s", account_id)
        return run

    async def _loop(self, account_id: str, run: ArenaRun) -> ArenaResult | None:
        settings = self.ctx.settings
        idle_ticks = 0
        max_idle_ticks = int(settings.arena_idle_timeout_seconds / settings.arena_tick_seconds)
        try:
            while not run.is_terminal:
                await asyncio.sleep(run.tick_seconds)
                if run.phase == PREPARATION:
                    idle_ticks += 1
                    if idle_ticks >= max_idle_ticks:
                        run.abandon()
                    continue
                idle_ticks = 0
                run.tick()
        except asyncio.CancelledError:
            run.abandon()
            try:
                await flush_result(self.ctx, account_id, run)
            finally:
                self._forget(account_id)
            raise
        try:
            return await flush_result(self.ctx, account_id, run)
        finally:
            self._forget(account_id)

    def _forget(self, account_id: str) -> None:
        self._runs.pop(account_id, None)
        self._tasks.pop(account_id, None)

    async def wait(self, account_id: str) -> ArenaResult | None:
        """Wait for a run's loop to finish and return the persisted result."""
        task = self._tasks.get(account_id)
        if task is None:
            return None
        return await task

    async def stop_all(self) -> None:
        """Cancel every live run and persist it as failed."""
        tasks = list(self._tasks.items())
        for _, task in tasks:
            task.cancel()
        for account_id, task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            # A task cancelled before its first step never reaches its own flush
            run = self._runs.get(account_id)
            if run is not None:
                self._forget(account_id)
                run.abandon()
                await flush_result(self.ctx, account_id, run)
