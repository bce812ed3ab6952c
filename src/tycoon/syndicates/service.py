"""Syndicate business logic.

Rules:
- One syndicate per account
- A member's contribution is the growth of the goal-tracked stat since it
  joined; changes are folded into the syndicate's progress as deltas
- When progress reaches the goal every member is paid once, then progress
  and membership reset (the syndicate itself persists, the goal repeats)

Aggregate progress is a shared document written with compare-and-swap;
contributions that race with a payout are retried against the fresh state
rather than dropped.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from tycoon.context import GameContext
from tycoon.documents import Account, ChatMessage, Membership, Reward, Syndicate, SyndicateGoal
from tycoon.errors import AlreadyInState, NotEligible, NotFound
from tycoon.ledger.service import load_account, pay_reward
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500

GOAL_STATS: dict[str, Callable[[Account], float]] = {
    "totalMinedBtc": lambda account: account.total_mined_btc,
}

DEFAULT_SYNDICATES: list[Syndicate] = [
    Syndicate(
        id="syndicate1",
        name="Crypto Kings",
        description="A powerful syndicate focused on mining massive amounts of BTC.",
        goal=SyndicateGoal(type="totalMinedBtc", target=1000),
        reward=Reward(btc=50, mining_power=20),
    ),
    Syndicate(
        id="syndicate2",
        name="Darkweb Elites",
        description="Elite hackers working together to dominate the market.",
        goal=SyndicateGoal(type="totalMinedBtc", target=500),
        reward=Reward(btc=30, mining_power=10),
    ),
]


def goal_stat(syndicate: Syndicate, account: Account) -> float:
    stat = GOAL_STATS.get(syndicate.goal.type)
    if stat is None:
        raise NotFound(f"Unknown syndicate goal type '{syndicate.goal.type}'")
    return stat(account)


async def get_syndicate(ctx: GameContext, syndicate_id: str) -> Syndicate:
    doc = await ctx.store.get(keys.syndicate(syndicate_id))
    if doc is None or doc.value is None:
        raise NotFound(f"Syndicate {syndicate_id} not found")
    return Syndicate.model_validate(doc.value)


async def list_syndicates(ctx: GameContext) -> list[Syndicate]:
    docs = await ctx.store.children(keys.SYNDICATES)
    return [Syndicate.model_validate(doc.value) for doc in docs]


async def get_membership(ctx: GameContext, account_id: str) -> Membership:
    doc = await ctx.store.get(keys.membership(account_id))
    if doc is None or doc.value is None:
        return Membership()
    return Membership.model_validate(doc.value)


async def load_membership(uow: UnitOfWork, account_id: str) -> Membership:
    return await uow.load(keys.membership(account_id), Membership) or Membership()


async def join(ctx: GameContext, account_id: str, syndicate_id: str) -> Membership:
    async def op(uow: UnitOfWork) -> Membership:
        syndicate = await uow.require(keys.syndicate(syndicate_id), Syndicate, what=f"Syndicate {syndicate_id}")
        membership = await load_membership(uow, account_id)
        if membership.syndicate_id:
            raise AlreadyInState("You are already in a syndicate. Leave it first.")
        account = await load_account(ctx, uow, account_id)

        if account_id not in syndicate.members:
            syndicate.members.append(account_id)
        membership = Membership(syndicate_id=syndicate_id, contribution=0.0, baseline=goal_stat(syndicate, account))
        uow.save(keys.syndicate(syndicate_id), syndicate)
        uow.save(keys.membership(account_id), membership)
        return membership

    membership = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s joined syndicate %s", account_id, syndicate_id)
    return membership


async def leave(ctx: GameContext, account_id: str) -> None:
    async def op(uow: UnitOfWork) -> str:
        membership = await load_membership(uow, account_id)
        if not membership.syndicate_id:
            raise NotEligible("You are not in a syndicate")
        syndicate_id = membership.syndicate_id
        syndicate = await uow.load(keys.syndicate(syndicate_id), Syndicate)
        if syndicate is not None:
            if account_id in syndicate.members:
                syndicate.members.remove(account_id)
            syndicate.progress = max(0.0, syndicate.progress - membership.contribution)
            uow.save(keys.syndicate(syndicate_id), syndicate)
        uow.save(keys.membership(account_id), Membership())
        return syndicate_id

    syndicate_id = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s left syndicate %s", account_id, syndicate_id)


async def update_contribution(ctx: GameContext, account_id: str) -> Membership:
    """Fold the growth of the account's goal stat into its syndicate's progress."""

    async def op(uow: UnitOfWork) -> tuple[Membership, float]:
        membership = await load_membership(uow, account_id)
        if not membership.syndicate_id:
            raise NotEligible("You are not in a syndicate")
        syndicate = await uow.require(
            keys.syndicate(membership.syndicate_id), Syndicate, what=f"Syndicate {membership.syndicate_id}"
        )
        account = await load_account(ctx, uow, account_id)

        new_contribution = max(0.0, goal_stat(syndicate, account) - membership.baseline)
        delta = new_contribution - membership.contribution
        if delta == 0:
            return membership, 0.0
        membership.contribution = new_contribution
        syndicate.progress += delta
        uow.save(keys.membership(account_id), membership)
        uow.save(keys.syndicate(syndicate.id), syndicate)
        return membership, delta

    membership, delta = await ctx.transact(op, account_id=account_id)
    if delta:
        logger.info("Account %s contributed %g to syndicate %s", account_id, delta, membership.syndicate_id)
        await check_goal(ctx, membership.syndicate_id)
    return membership


async def check_goal(ctx: GameContext, syndicate_id: str) -> list[str]:
    """Pay every member and reset if the goal is reached. Returns the paid members.

    Payout, membership resets and the syndicate reset land in one commit.
    """

    async def op(uow: UnitOfWork) -> list[str]:
        syndicate = await uow.require(keys.syndicate(syndicate_id), Syndicate, what=f"Syndicate {syndicate_id}")
        if syndicate.progress < syndicate.goal.target:
            return []

        paid: list[str] = []
        for member_id in syndicate.members:
            account = await load_account(ctx, uow, member_id)
            pay_reward(account, syndicate.reward)
            uow.save(keys.account(member_id), account)
            await load_membership(uow, member_id)
            uow.save(keys.membership(member_id), Membership())
            paid.append(member_id)

        syndicate.progress = 0.0
        syndicate.members = []
        uow.save(keys.syndicate(syndicate_id), syndicate)
        return paid

    paid = await ctx.transact(op)
    if paid:
        logger.info("Syndicate %s reached its goal; paid %d members", syndicate_id, len(paid))
    return paid


# --- Chat ---


async def post_message(ctx: GameContext, account_id: str, text: str) -> ChatMessage:
    message = text.strip()
    if not message:
        raise NotEligible("Message cannot be empty")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise NotEligible(f"Message longer than {MAX_MESSAGE_LENGTH} characters")

    async def op(uow: UnitOfWork) -> ChatMessage:
        membership = await load_membership(uow, account_id)
        if not membership.syndicate_id:
            raise NotEligible("Join a syndicate to use its chat")
        account = await load_account(ctx, uow, account_id)
        now = ctx.clock.now()
        # Time-prefixed ids keep key order equal to posting order
        msg_id = f"{now:%Y%m%d%H%M%S%f}-{uuid.uuid4().hex[:8]}"
        chat_message = ChatMessage(
            id=msg_id,
            account_id=account_id,
            user_name=account.nickname or account_id[:8],
            message=message,
            timestamp=now,
        )
        uow.save(f"{keys.chat(membership.syndicate_id)}{msg_id}", chat_message)
        return chat_message

    return await ctx.transact(op, account_id=account_id)


async def list_messages(ctx: GameContext, syndicate_id: str, limit: int = 50) -> list[ChatMessage]:
    docs = await ctx.store.children(keys.chat(syndicate_id))
    messages = [ChatMessage.model_validate(doc.value) for doc in docs]
    return messages[-limit:]
