"""Achievement awarding. Each achievement is granted at most once."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from tycoon.context import GameContext
from tycoon.documents import Account, Achievement, UserQuest
from tycoon.ledger.service import load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class AchievementStats:
    account: Account
    completed_quests: int


@dataclass(frozen=True)
class AchievementDefinition:
    slug: str
    name: str
    description: str
    earned: Callable[[AchievementStats], bool]


ACHIEVEMENTS: list[AchievementDefinition] = [
    AchievementDefinition(
        "first-transaction", "First Transaction", "Complete your first transaction.",
        lambda stats: stats.account.transactions >= 1,
    ),
    AchievementDefinition(
        "millionaire", "Millionaire", "Earn 1000 BTC.",
        lambda stats: stats.account.btc_balance >= 1000,
    ),
    AchievementDefinition(
        "quest-master", "Quest Master", "Complete 5 quests.",
        lambda stats: stats.completed_quests >= 5,
    ),
]


async def list_achievements(ctx: GameContext, account_id: str) -> list[Achievement]:
    docs = await ctx.store.children(keys.achievements(account_id))
    return [Achievement.model_validate(doc.value) for doc in docs]


async def check_achievements(ctx: GameContext, account_id: str) -> list[Achievement]:
    """Award every achievement the account now qualifies for. Returns the new ones."""

    async def op(uow: UnitOfWork) -> list[Achievement]:
        account = await load_account(ctx, uow, account_id)
        quests = await uow.load_children(keys.user_quests(account_id), UserQuest)
        stats = AchievementStats(
            account=account,
            completed_quests=sum(1 for q in quests if q.status == "completed"),
        )
        awarded: list[Achievement] = []
        for definition in ACHIEVEMENTS:
            key = f"{keys.achievements(account_id)}{definition.slug}"
            if await uow.load(key, Achievement) is not None or not definition.earned(stats):
                continue
            achievement = Achievement(
                slug=definition.slug,
                name=definition.name,
                description=definition.description,
                awarded_at=ctx.clock.now(),
            )
            uow.save(key, achievement)
            awarded.append(achievement)
        return awarded

    awarded = await ctx.transact(op, account_id=account_id)
    for achievement in awarded:
        logger.info("Account %s earned achievement %s", account_id, achievement.slug)
    return awarded
