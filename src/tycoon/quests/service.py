"""Quest tracking: available -> accepted -> completed.

Progress is a projection of live account state, recomputed on every
evaluation by a per-type provider. Completion is one-way and pays the
reward exactly once; evaluating a completed quest is a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from tycoon.config import Settings
from tycoon.construction.service import load_farms
from tycoon.context import GameContext
from tycoon.documents import ACTIVE, Account, Farm, QuestTemplate, Reward, UserQuest
from tycoon.errors import AlreadyInState, NotFound
from tycoon.ledger.service import bump_weekly_stat, load_account, pay_reward
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class QuestSnapshot:
    """Live state a progress provider reads from."""

    account: Account
    farms: list[Farm]
    settings: Settings


ProgressProvider = Callable[[QuestSnapshot], float]

PROGRESS_PROVIDERS: dict[str, ProgressProvider] = {
    "farm-count": lambda snap: float(sum(1 for farm in snap.farms if farm.status == ACTIVE)),
    "btc-earned": lambda snap: snap.account.btc_balance - snap.settings.initial_btc_balance,
}

DEFAULT_QUESTS: list[QuestTemplate] = [
    QuestTemplate(
        id="first-farm",
        name="Break Ground",
        description="Get your first mining farm up and running.",
        type="farm-count",
        target=1,
        reward=Reward(btc=5, mining_power=2),
    ),
    QuestTemplate(
        id="farm-baron",
        name="Farm Baron",
        description="Operate three active mining farms.",
        type="farm-count",
        target=3,
        reward=Reward(btc=25, mining_power=10),
    ),
    QuestTemplate(
        id="bitcoin-hoarder",
        name="Bitcoin Hoarder",
        description="Grow your BTC balance by 50 above the starting grant.",
        type="btc-earned",
        target=50,
        reward=Reward(btc=20, mining_power=5),
    ),
]


def apply_progress(user_quest: UserQuest, template: QuestTemplate, progress: float, now: datetime) -> bool:
    """Update an accepted quest in place. True if this call completed it."""
    if user_quest.status == "completed":
        return False
    if progress >= template.target:
        user_quest.progress = template.target
        user_quest.status = "completed"
        user_quest.completed_at = now
        return True
    user_quest.progress = max(0.0, progress)
    return False


async def list_quests(ctx: GameContext) -> list[QuestTemplate]:
    docs = await ctx.store.children(keys.QUESTS)
    return [QuestTemplate.model_validate(doc.value) for doc in docs]


async def list_user_quests(ctx: GameContext, account_id: str) -> list[UserQuest]:
    docs = await ctx.store.children(keys.user_quests(account_id))
    return [UserQuest.model_validate(doc.value) for doc in docs]


async def accept(ctx: GameContext, account_id: str, quest_id: str) -> UserQuest:
    async def op(uow: UnitOfWork) -> UserQuest:
        await uow.require(keys.quest(quest_id), QuestTemplate, what=f"Quest {quest_id}")
        await load_account(ctx, uow, account_id)
        key = keys.user_quest(account_id, quest_id)
        if await uow.load(key, UserQuest) is not None:
            raise AlreadyInState(f"Quest {quest_id} already accepted")
        user_quest = UserQuest(quest_id=quest_id, accepted_at=ctx.clock.now())
        uow.save(key, user_quest)
        return user_quest

    user_quest = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s accepted quest %s", account_id, quest_id)
    return user_quest


async def evaluate(ctx: GameContext, account_id: str) -> list[UserQuest]:
    """Recompute progress on every accepted quest and pay out completions."""

    async def op(uow: UnitOfWork) -> tuple[list[UserQuest], list[str]]:
        now = ctx.clock.now()
        account = await load_account(ctx, uow, account_id)
        farms = await load_farms(uow, account_id, now)
        snapshot = QuestSnapshot(account=account, farms=farms, settings=ctx.settings)

        completed: list[str] = []
        user_quests = await uow.load_children(keys.user_quests(account_id), UserQuest)
        for user_quest in user_quests:
            if user_quest.status == "completed":
                continue
            template = await uow.load(keys.quest(user_quest.quest_id), QuestTemplate)
            if template is None:
                continue
            provider = PROGRESS_PROVIDERS.get(template.type)
            if provider is None:
                logger.warning("No progress provider for quest type %s", template.type)
                continue

            if apply_progress(user_quest, template, provider(snapshot), now):
                pay_reward(account, template.reward)
                await bump_weekly_stat(uow, account_id, now, btc_earned=template.reward.btc, quests_completed=1)
                completed.append(template.id)
            uow.save(keys.user_quest(account_id, user_quest.quest_id), user_quest)

        if completed:
            uow.save(keys.account(account_id), account)
        return user_quests, completed

    user_quests, completed = await ctx.transact(op, account_id=account_id)
    for quest_id in completed:
        logger.info("Account %s completed quest %s", account_id, quest_id)
    return user_quests


async def get_user_quest(ctx: GameContext, account_id: str, quest_id: str) -> UserQuest:
    doc = await ctx.store.get(keys.user_quest(account_id, quest_id))
    if doc is None or doc.value is None:
        raise NotFound(f"Quest {quest_id} not accepted")
    return UserQuest.model_validate(doc.value)
