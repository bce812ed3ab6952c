"""Passive mining accrual.

Hashrate earns ``btc_per_th_per_day`` BTC per TH/s per day. Accrual is lazy:
the BTC earned since ``last_mined_at`` is credited whenever an account is
refreshed, either by the player or by the scheduled job. Credited BTC also
counts toward ``total_mined_btc``, the stat syndicate goals track.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from tycoon.construction.service import active_mining_power, load_farms
from tycoon.context import GameContext
from tycoon.documents import Account, Farm
from tycoon.ledger.service import bump_weekly_stat, load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DAY = timedelta(days=1)


def effective_mining_power(account: Account, farms: list[Farm]) -> float:
    """Base hashrate plus active farms, scaled by the account's multiplier."""
    return (account.mining_power + active_mining_power(farms)) * account.mining_power_multiplier


def mined_between(power: float, elapsed: timedelta, btc_per_th_per_day: float) -> float:
    if elapsed <= timedelta(0):
        return 0.0
    return power * btc_per_th_per_day * (elapsed / DAY)


async def accrue(ctx: GameContext, account_id: str) -> Account:
    """Credit BTC mined since the last accrual and resolve finished farms."""

    async def op(uow: UnitOfWork) -> tuple[Account, float]:
        now = ctx.clock.now()
        account = await load_account(ctx, uow, account_id)
        farms = await load_farms(uow, account_id, now)
        last = account.last_mined_at or now
        mined = mined_between(effective_mining_power(account, farms), now - last, ctx.settings.btc_per_th_per_day)
        account.btc_balance += mined
        account.total_mined_btc += mined
        account.last_mined_at = now
        uow.save(keys.account(account_id), account)
        if mined > 0:
            await bump_weekly_stat(uow, account_id, now, btc_earned=mined)
        return account, mined

    account, mined = await ctx.transact(op, account_id=account_id)
    if mined:
        logger.debug("Account %s mined %.8f BTC", account_id, mined)
    return account
