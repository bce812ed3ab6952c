"""BTC/USD exchange with a simulated random-walk price.

The price is a singleton document. Every ``market_tick_seconds`` it moves by
a uniform factor in [-volatility, +volatility] and is rounded to whole USD,
never falling below ``market_min_price``. Elapsed ticks are applied lazily
whenever the price is read, and by the scheduled market job.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import timedelta

from tycoon.context import GameContext
from tycoon.documents import MarketPrice, TransactionRecord
from tycoon.errors import NotEligible
from tycoon.ledger.service import bump_weekly_stat, debit_btc, debit_usd, load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def next_price(price: float, rng: random.Random, volatility: float, floor: float) -> float:
    """One tick of the price walk."""
    change = rng.uniform(-volatility, volatility)
    return max(floor, float(round(price * (1 + change))))


async def load_price(ctx: GameContext, uow: UnitOfWork) -> MarketPrice:
    """Load the price, applying every whole tick elapsed since ``last_tick``."""
    settings = ctx.settings
    now = ctx.clock.now()
    market = await uow.load(keys.MARKET_PRICE, MarketPrice)
    if market is None:
        market = MarketPrice(price=settings.market_start_price, last_tick=now)
        uow.save(keys.MARKET_PRICE, market)
        return market

    tick = timedelta(seconds=settings.market_tick_seconds)
    elapsed = int((now - market.last_tick) / tick)
    if elapsed <= 0:
        return market

    rng = ctx.rng.stream("market.price")
    for _ in range(min(elapsed, settings.market_max_catchup_ticks)):
        market.price = next_price(market.price, rng, settings.market_volatility, settings.market_min_price)
    market.last_tick = market.last_tick + tick * elapsed
    uow.save(keys.MARKET_PRICE, market)
    return market


async def get_price(ctx: GameContext) -> MarketPrice:
    async def op(uow: UnitOfWork) -> MarketPrice:
        return await load_price(ctx, uow)

    return await ctx.transact(op)


async def buy(ctx: GameContext, account_id: str, amount: float) -> TransactionRecord:
    """Spend USD for ``amount`` BTC at the current price."""
    return await _trade(ctx, account_id, "buy", amount)


async def sell(ctx: GameContext, account_id: str, amount: float) -> TransactionRecord:
    """Sell ``amount`` BTC for USD at the current price."""
    return await _trade(ctx, account_id, "sell", amount)


async def _trade(ctx: GameContext, account_id: str, side: str, amount: float) -> TransactionRecord:
    if amount <= 0:
        raise NotEligible("Trade amount must be positive")

    async def op(uow: UnitOfWork) -> TransactionRecord:
        market = await load_price(ctx, uow)
        account = await load_account(ctx, uow, account_id)
        total = amount * market.price
        if side == "buy":
            debit_usd(account, total)
            account.btc_balance += amount
        else:
            debit_btc(account, amount)
            account.usd_balance += total
        account.transactions += 1
        account.largest_transaction = max(account.largest_transaction, amount)

        now = ctx.clock.now()
        record = TransactionRecord(
            id=uuid.uuid4().hex, type=side, amount=amount, price=market.price, timestamp=now,
        )
        uow.save(keys.account(account_id), account)
        uow.save(keys.transaction(account_id, record.id), record)
        await bump_weekly_stat(uow, account_id, now, trades=1)
        return record

    record = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s %s %g BTC at %g USD", account_id, side, amount, record.price)
    return record


async def list_transactions(ctx: GameContext, account_id: str) -> list[TransactionRecord]:
    docs = await ctx.store.children(keys.transactions(account_id))
    records = [TransactionRecord.model_validate(doc.value) for doc in docs]
    return sorted(records, key=lambda r: r.timestamp, reverse=True)
