"""Darkweb market and the rolling 24h Darkweb Heist event."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from tycoon.context import GameContext
from tycoon.documents import CompanionState, DarkwebEvent, DarkwebItem, EventTask, ItemEffect, LootBundle
from tycoon.errors import AlreadyInState, NotEligible, NotFound
from tycoon.ledger.service import debit_btc, grant_item, load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CONTRIBUTE_TASK = "Contribute BTC"
ROBBERY_TASK = "Complete CryptoBank Robberies"
EVENT_DURATION = timedelta(hours=24)

DEFAULT_ITEMS: list[DarkwebItem] = [
    DarkwebItem(
        id="decryptor",
        name="Decryptor",
        description="Cracks cold-wallet firmware. NEON keeps asking for one.",
        price=25,
        effect=ItemEffect(type="miningPower", value=5),
    ),
    DarkwebItem(
        id="quantum-miner",
        name="Quantum Miner",
        description="Experimental rig that hashes in superposition.",
        price=100,
        effect=ItemEffect(type="miningPower", value=50),
    ),
    DarkwebItem(
        id="contractor-bribe",
        name="Contractor Bribe",
        description="Your builders look the other way on permits.",
        price=40,
        effect=ItemEffect(type="buildCostMultiplier", value=0.9),
    ),
]


# --- Market ---


async def list_items(ctx: GameContext) -> list[DarkwebItem]:
    docs = await ctx.store.children(keys.DARKWEB_ITEMS)
    return [DarkwebItem.model_validate(doc.value) for doc in docs]


async def purchase(ctx: GameContext, account_id: str, item_id: str) -> DarkwebItem:
    async def op(uow: UnitOfWork) -> DarkwebItem:
        item = await uow.require(keys.darkweb_item(item_id), DarkwebItem, what=f"Item {item_id}")
        account = await load_account(ctx, uow, account_id)
        debit_btc(account, item.price)
        if item.effect.type == "miningPower":
            account.mining_power += item.effect.value
        elif item.effect.type == "buildCostMultiplier":
            account.build_cost_multiplier *= item.effect.value
        grant_item(account, item.name)
        uow.save(keys.account(account_id), account)
        return item

    item = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s bought %s for %g BTC", account_id, item.name, item.price)
    return item


# --- Events ---


def new_event(sequence: int, now: datetime) -> DarkwebEvent:
    return DarkwebEvent(
        id=f"event_{sequence:06d}",
        name="Darkweb Heist",
        description="Join a syndicate to steal from the Darkweb Vault!",
        deadline=now + EVENT_DURATION,
        tasks=[
            EventTask(description=CONTRIBUTE_TASK, target=500),
            EventTask(description=ROBBERY_TASK, target=10),
        ],
        rewards=LootBundle(btc=200, shards=20, items=["Darkweb Key"]),
    )


def is_complete(event: DarkwebEvent) -> bool:
    return all(task.progress >= task.target for task in event.tasks)


def _task(event: DarkwebEvent, description: str) -> EventTask:
    for task in event.tasks:
        if task.description == description:
            return task
    raise NotFound(f"Event {event.id} has no task '{description}'")


async def _active_events(uow: UnitOfWork, now: datetime) -> tuple[list[DarkwebEvent], int]:
    events = await uow.load_children(keys.DARKWEB_EVENTS, DarkwebEvent)
    return [e for e in events if e.deadline > now], len(events)


async def ensure_event(ctx: GameContext) -> DarkwebEvent:
    """Return the running event, opening a new one if the last has expired.

    Event ids are sequential, so two callers racing to open the next event
    collide on the same key and the loser retries against the winner's.
    """

    async def op(uow: UnitOfWork) -> DarkwebEvent:
        now = ctx.clock.now()
        active, total = await _active_events(uow, now)
        if active:
            return active[-1]
        event = new_event(total + 1, now)
        uow.save(keys.darkweb_event(event.id), event)
        logger.info("Opened darkweb event %s (deadline %s)", event.id, event.deadline)
        return event

    return await ctx.transact(op)


async def list_active_events(ctx: GameContext) -> list[DarkwebEvent]:
    now = ctx.clock.now()
    docs = await ctx.store.children(keys.DARKWEB_EVENTS)
    events = [DarkwebEvent.model_validate(doc.value) for doc in docs]
    return [e for e in events if e.deadline > now]


async def _load_open_event(ctx: GameContext, uow: UnitOfWork, event_id: str) -> DarkwebEvent:
    event = await uow.require(keys.darkweb_event(event_id), DarkwebEvent, what=f"Event {event_id}")
    if event.deadline <= ctx.clock.now():
        raise NotEligible("This event has ended")
    return event


async def join_event(ctx: GameContext, account_id: str, event_id: str) -> DarkwebEvent:
    async def op(uow: UnitOfWork) -> DarkwebEvent:
        event = await _load_open_event(ctx, uow, event_id)
        if account_id in event.participants:
            raise AlreadyInState("You already joined this event")
        event.participants.append(account_id)
        uow.save(keys.darkweb_event(event_id), event)
        return event

    return await ctx.transact(op, account_id=account_id)


async def contribute_btc(ctx: GameContext, account_id: str, event_id: str, amount: float) -> DarkwebEvent:
    """Move BTC into the event's vault task. Only the amount still needed is taken."""
    if amount <= 0:
        raise NotEligible("Contribution must be positive")

    async def op(uow: UnitOfWork) -> DarkwebEvent:
        event = await _load_open_event(ctx, uow, event_id)
        if account_id not in event.participants:
            raise NotEligible("Join the event before contributing")
        task = _task(event, CONTRIBUTE_TASK)
        needed = task.target - task.progress
        if needed <= 0:
            raise AlreadyInState("The vault target is already reached")
        applied = min(amount, needed)

        account = await load_account(ctx, uow, account_id)
        debit_btc(account, applied)
        task.progress += applied
        uow.save(keys.account(account_id), account)
        uow.save(keys.darkweb_event(event_id), event)
        return event

    return await ctx.transact(op, account_id=account_id)


async def record_robbery(uow: UnitOfWork, now: datetime) -> None:
    """Count one successful CryptoBank robbery toward every running event."""
    active, _ = await _active_events(uow, now)
    for event in active:
        task = _task(event, ROBBERY_TASK)
        if task.progress < task.target:
            task.progress += 1
            uow.save(keys.darkweb_event(event.id), event)


async def claim_rewards(ctx: GameContext, account_id: str, event_id: str) -> LootBundle:
    """Pay a participant once all tasks of the event are complete."""

    async def op(uow: UnitOfWork) -> LootBundle:
        event = await uow.require(keys.darkweb_event(event_id), DarkwebEvent, what=f"Event {event_id}")
        if account_id not in event.participants:
            raise NotEligible("You did not take part in this event")
        if not is_complete(event):
            raise NotEligible("The event tasks are not complete yet")
        if account_id in event.claimed_by:
            raise AlreadyInState("Rewards already claimed")

        account = await load_account(ctx, uow, account_id)
        account.btc_balance += event.rewards.btc
        for item in event.rewards.items:
            grant_item(account, item)
        neon = await uow.load(keys.neon(account_id), CompanionState) or CompanionState()
        neon.shards += event.rewards.shards

        event.claimed_by.append(account_id)
        uow.save(keys.account(account_id), account)
        uow.save(keys.neon(account_id), neon)
        uow.save(keys.darkweb_event(event_id), event)
        return event.rewards

    rewards = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s claimed darkweb event %s rewards", account_id, event_id)
    return rewards
