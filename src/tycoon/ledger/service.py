"""Account ledger: balances, counters and multipliers every service mutates.

Accounts are created on first access with the initial grant and never
deleted. All helpers here operate on an ``Account`` already loaded into a
unit of work; the caller commits.
"""

from __future__ import annotations

import logging
from datetime import datetime

from tycoon.context import GameContext
from tycoon.documents import Account, Reward, WeeklyStat
from tycoon.errors import InsufficientFunds, NotFound
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork
from tycoon.week_utils import get_week_iso

logger = logging.getLogger(__name__)


def new_account(ctx: GameContext, account_id: str, nickname: str = "") -> Account:
    """Build a fresh account carrying the initial grant."""
    settings = ctx.settings
    return Account(
        id=account_id,
        nickname=nickname,
        avatar=settings.initial_avatar,
        btc_balance=settings.initial_btc_balance,
        usd_balance=settings.initial_usd_balance,
        created_at=ctx.clock.now(),
        last_mined_at=ctx.clock.now(),
    )


async def load_account(ctx: GameContext, uow: UnitOfWork, account_id: str) -> Account:
    """Load an account, staging its creation if this is the first access."""
    account = await uow.load(keys.account(account_id), Account)
    if account is None:
        account = new_account(ctx, account_id)
        uow.save(keys.account(account_id), account)
        logger.info("Account %s created with initial grant", account_id)
    return account


async def get_account(ctx: GameContext, account_id: str) -> Account:
    doc = await ctx.store.get(keys.account(account_id))
    if doc is None or doc.value is None:
        raise NotFound(f"Account {account_id} not found")
    return Account.model_validate(doc.value)


async def list_accounts(ctx: GameContext) -> list[Account]:
    docs = await ctx.store.children(keys.ACCOUNTS)
    return [Account.model_validate(doc.value) for doc in docs]


async def list_weekly_stats(ctx: GameContext, account_id: str) -> list[WeeklyStat]:
    """Per-ISO-week counters, most recent week first."""
    docs = await ctx.store.children(keys.weekly_stats(account_id))
    return [WeeklyStat.model_validate(doc.value) for doc in reversed(docs)]


async def update_profile(
    ctx: GameContext,
    account_id: str,
    nickname: str | None = None,
    avatar: str | None = None,
) -> Account:
    async def op(uow: UnitOfWork) -> Account:
        account = await load_account(ctx, uow, account_id)
        if nickname is not None:
            account.nickname = nickname.strip()
        if avatar is not None:
            account.avatar = avatar
        uow.save(keys.account(account_id), account)
        return account

    return await ctx.transact(op, account_id=account_id)


# --- In-memory mutations (caller stages and commits) ---


def debit_btc(account: Account, amount: float) -> None:
    if account.btc_balance < amount:
        raise InsufficientFunds(
            f"Insufficient BTC balance: need {amount:g}, have {account.btc_balance:g}"
        )
    account.btc_balance -= amount


def debit_usd(account: Account, amount: float) -> None:
    if account.usd_balance < amount:
        raise InsufficientFunds(
            f"Insufficient USD balance: need {amount:g}, have {account.usd_balance:g}"
        )
    account.usd_balance -= amount


def pay_reward(account: Account, reward: Reward) -> None:
    account.btc_balance += reward.btc
    account.mining_power += reward.mining_power


def grant_item(account: Account, item: str) -> None:
    account.items.append(item)


def take_item(account: Account, item: str) -> bool:
    """Remove one copy of ``item``; False if the account holds none."""
    if item not in account.items:
        return False
    account.items.remove(item)
    return True


async def bump_weekly_stat(
    uow: UnitOfWork,
    account_id: str,
    now: datetime,
    *,
    btc_earned: float = 0.0,
    quests_completed: int = 0,
    trades: int = 0,
) -> WeeklyStat:
    """Fold counters into the account's stat document for the ISO week of ``now``."""
    week_iso = get_week_iso(now)
    key = keys.weekly_stat(account_id, week_iso)
    stat = await uow.load(key, WeeklyStat) or WeeklyStat(week_iso=week_iso)
    stat.btc_earned += btc_earned
    stat.quests_completed += quests_completed
    stat.trades += trades
    uow.save(key, stat)
    return stat
