"""Weekly CryptoBank heist: a global five-stage state machine.

State progression: observation -> planning -> insider -> execution -> finished
Transitions are validated: no skipping stages or going backwards. The event
is a singleton recreated for the current ISO week whenever it is read at or
after its end time. Participating syndicates push progress forward in steps of 20;
each stage change raises the success chance, and entering ``finished`` draws
the outcome: every member of every participating syndicate is paid on
success and sent to prison for a day on failure.

``advance`` accepts an optional action id. A repeated id is merged into the
first application instead of advancing twice.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from tycoon.context import GameContext
from tycoon.darkweb.service import record_robbery
from tycoon.documents import HeistEvent, PrisonStatus, Syndicate
from tycoon.errors import AlreadyInState, NotEligible
from tycoon.ledger.service import load_account, pay_reward, take_item
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork
from tycoon.syndicates.service import load_membership
from tycoon.week_utils import get_week_boundaries, get_week_iso

logger = logging.getLogger(__name__)

STAGES: list[str] = ["observation", "planning", "insider", "execution", "finished"]

VALID_TRANSITIONS: dict[str, list[str]] = {
    "observation": ["planning"],
    "planning": ["insider"],
    "insider": ["execution"],
    "execution": ["finished"],
    "finished": [],
}

# Success chance added when entering a stage
STAGE_BONUS: dict[str, float] = {"planning": 10, "insider": 20, "execution": 30, "finished": 0}

PROGRESS_STEP = 20
STAGE_COMPLETE = 100
SHADOW_CORE = "SHADOW Core"
SHADOW_CORE_BONUS = 5
MAX_REMEMBERED_ACTIONS = 200
WEEK = timedelta(days=7)


def validate_transition(current_stage: str, target_stage: str) -> None:
    """Validate a stage transition. Raises ValueError if invalid."""
    valid = VALID_TRANSITIONS.get(current_stage, [])
    if target_stage not in valid:
        raise ValueError(
            f"Invalid transition: {current_stage} -> {target_stage}. "
            f"Valid transitions: {valid}"
        )


def stage_index(stage: str) -> int:
    return STAGES.index(stage)


def new_event(now: datetime) -> HeistEvent:
    """A fresh event for the ISO week containing ``now``.

    ``end_time`` is exclusive: the next Monday 00:00 UTC.
    """
    start, _ = get_week_boundaries(now)
    return HeistEvent(event_id=get_week_iso(now), start_time=start, end_time=start + WEEK)


def resolve_event(event: HeistEvent | None, now: datetime) -> HeistEvent:
    """Return the event valid at ``now``, replacing an expired or missing one."""
    if event is None or now >= event.end_time:
        return new_event(now)
    return event


async def load_event(ctx: GameContext, uow: UnitOfWork) -> HeistEvent:
    now = ctx.clock.now()
    stored = await uow.load(keys.HEIST_EVENT, HeistEvent)
    event = resolve_event(stored, now)
    if event is not stored:
        uow.save(keys.HEIST_EVENT, event)
        logger.info("Heist event reset for %s", event.event_id)
    return event


async def get_event(ctx: GameContext) -> HeistEvent:
    async def op(uow: UnitOfWork) -> HeistEvent:
        return await load_event(ctx, uow)

    return await ctx.transact(op)


async def get_prison_status(ctx: GameContext, account_id: str) -> PrisonStatus:
    doc = await ctx.store.get(keys.prison(account_id))
    if doc is None or doc.value is None:
        return PrisonStatus()
    return PrisonStatus.model_validate(doc.value)


async def _imprisoned(uow: UnitOfWork, account_id: str, now: datetime) -> bool:
    status = await uow.load(keys.prison(account_id), PrisonStatus)
    return status is not None and status.is_imprisoned(now)


async def join(ctx: GameContext, account_id: str) -> HeistEvent:
    """Enter the caller's syndicate into this week's heist."""

    async def op(uow: UnitOfWork) -> HeistEvent:
        now = ctx.clock.now()
        membership = await load_membership(uow, account_id)
        if not membership.syndicate_id:
            raise NotEligible("Join a syndicate before entering the heist")
        event = await load_event(ctx, uow)
        syndicate_id = membership.syndicate_id
        if syndicate_id in event.participants:
            raise AlreadyInState("Your syndicate is already participating")
        if event.stage == "finished":
            raise NotEligible("This week's heist is over")

        syndicate = await uow.require(keys.syndicate(syndicate_id), Syndicate, what=f"Syndicate {syndicate_id}")
        for member_id in {account_id, *syndicate.members}:
            if await _imprisoned(uow, member_id, now):
                raise NotEligible("A member of your syndicate is in prison and cannot participate")

        account = await load_account(ctx, uow, account_id)
        if take_item(account, SHADOW_CORE):
            event.success_chance += SHADOW_CORE_BONUS
            uow.save(keys.account(account_id), account)
            logger.info("Account %s spent a %s on the heist", account_id, SHADOW_CORE)

        event.participants.append(syndicate_id)
        uow.save(keys.HEIST_EVENT, event)
        return event

    event = await ctx.transact(op, account_id=account_id)
    logger.info("Syndicate of account %s joined heist %s", account_id, event.event_id)
    return event


async def advance(ctx: GameContext, account_id: str, action_id: str | None = None) -> HeistEvent:
    """Push the heist forward by one step on behalf of the caller's syndicate."""
    # Drawn at most once per call so a retried commit reuses the same outcome
    roll: float | None = None

    async def op(uow: UnitOfWork) -> HeistEvent:
        nonlocal roll
        now = ctx.clock.now()
        membership = await load_membership(uow, account_id)
        event = await load_event(ctx, uow)
        if not membership.syndicate_id or membership.syndicate_id not in event.participants:
            raise NotEligible("Your syndicate is not participating in this event")
        if action_id is not None and action_id in event.applied_actions:
            return event
        if event.stage == "finished":
            raise NotEligible("This week's heist is already finished")

        event.progress += PROGRESS_STEP
        if event.progress >= STAGE_COMPLETE:
            target = STAGES[stage_index(event.stage) + 1]
            validate_transition(event.stage, target)
            event.progress = 0
            event.stage = target
            event.success_chance += STAGE_BONUS[target]
            logger.info("Heist %s moved to stage %s (success chance %g)", event.event_id, target, event.success_chance)
            if target == "finished":
                if roll is None:
                    roll = ctx.rng.stream("heist.outcome").random() * 100
                await _finish(ctx, uow, event, now, roll)

        if action_id is not None:
            event.applied_actions = [*event.applied_actions, action_id][-MAX_REMEMBERED_ACTIONS:]
        uow.save(keys.HEIST_EVENT, event)
        return event

    return await ctx.transact(op)


async def _finish(ctx: GameContext, uow: UnitOfWork, event: HeistEvent, now: datetime, roll: float) -> None:
    success = roll < event.success_chance
    event.outcome = "success" if success else "failure"

    members: list[str] = []
    for syndicate_id in event.participants:
        syndicate = await uow.load(keys.syndicate(syndicate_id), Syndicate)
        if syndicate is not None:
            members.extend(m for m in syndicate.members if m not in members)

    prison_end = now + timedelta(hours=ctx.settings.heist_prison_hours)
    for member_id in members:
        if success:
            account = await load_account(ctx, uow, member_id)
            pay_reward(account, event.reward)
            uow.save(keys.account(member_id), account)
        else:
            status = await uow.load(keys.prison(member_id), PrisonStatus) or PrisonStatus()
            status.in_prison = True
            status.prison_end_time = prison_end
            uow.save(keys.prison(member_id), status)

    if success:
        await record_robbery(uow, now)
        logger.info("Heist %s succeeded; paid %d members", event.event_id, len(members))
    else:
        logger.info("Heist %s failed; %d members imprisoned until %s", event.event_id, len(members), prison_end)
