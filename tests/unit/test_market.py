"""BTC/USD exchange."""

from __future__ import annotations

import random
from datetime import timedelta

import pytest

from tycoon.clock import FrozenClock
from tycoon.context import GameContext
from tycoon.errors import InsufficientFunds, NotEligible
from tycoon.ledger.service import get_account, list_weekly_stats
from tycoon.market.service import buy, get_price, list_transactions, next_price, sell


class TestPriceWalk:
    def test_step_is_bounded_and_whole(self):
        rng = random.Random(3)
        price = 45_230.0
        for _ in range(100):
            new = next_price(price, rng, 0.05, 1.0)
            assert price * 0.95 - 1 <= new <= price * 1.05 + 1
            assert new == int(new)
            price = new

    def test_never_below_floor(self):
        rng = random.Random(5)
        price = 1.0
        for _ in range(200):
            price = next_price(price, rng, 0.05, 1.0)
            assert price >= 1.0

    async def test_starts_at_configured_price(self, ctx: GameContext):
        market = await get_price(ctx)
        assert market.price == 45_230
        assert market.last_tick == ctx.clock.now()

    async def test_elapsed_ticks_applied_on_read(self, ctx: GameContext, clock: FrozenClock):
        start = await get_price(ctx)
        clock.advance(seconds=12)
        market = await get_price(ctx)
        # Two whole 5s ticks; the 2s remainder waits for the next read
        assert market.last_tick == start.last_tick + timedelta(seconds=10)
        again = await get_price(ctx)
        assert again == market


class TestTrading:
    async def test_buy(self, ctx: GameContext):
        record = await buy(ctx, "alice", 0.1)
        account = await get_account(ctx, "alice")
        assert record.type == "buy"
        assert record.price == 45_230
        assert account.btc_balance == pytest.approx(10.1)
        assert account.usd_balance == pytest.approx(10_000 - 4_523)
        assert account.transactions == 1
        assert account.largest_transaction == pytest.approx(0.1)

    async def test_buy_beyond_usd_rejected(self, ctx: GameContext):
        with pytest.raises(InsufficientFunds):
            await buy(ctx, "alice", 1)
        account = await get_account(ctx, "alice")
        assert account.usd_balance == 10_000
        assert account.transactions == 0
        assert await list_transactions(ctx, "alice") == []

    async def test_sell_beyond_btc_rejected(self, ctx: GameContext):
        with pytest.raises(InsufficientFunds):
            await sell(ctx, "alice", 11)

    async def test_round_trip_restores_balances(self, ctx: GameContext):
        await buy(ctx, "alice", 0.1)
        await sell(ctx, "alice", 0.1)
        account = await get_account(ctx, "alice")
        assert account.btc_balance == pytest.approx(10)
        assert account.usd_balance == pytest.approx(10_000)
        assert account.transactions == 2

    @pytest.mark.parametrize("amount", [0, -1])
    async def test_non_positive_amount(self, ctx: GameContext, amount: float):
        with pytest.raises(NotEligible):
            await buy(ctx, "alice", amount)

    async def test_trade_records_log_and_weekly_stat(self, ctx: GameContext, clock: FrozenClock):
        await buy(ctx, "alice", 0.1)
        clock.advance(seconds=1)
        await sell(ctx, "alice", 0.05)
        records = await list_transactions(ctx, "alice")
        assert [r.type for r in records] == ["sell", "buy"]
        weeks = await list_weekly_stats(ctx, "alice")
        assert weeks[0].week_iso == "2026-W02"
        assert weeks[0].trades == 2
