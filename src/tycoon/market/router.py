"""BTC/USD exchange endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tycoon.achievements.service import check_achievements
from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import MarketPrice
from tycoon.ledger.service import get_account
from tycoon.market.schemas import TradeRequest, TradeResponse
from tycoon.market.service import buy, get_price, sell

router = APIRouter(prefix="/api/v1/market", tags=["Market"])


@router.get("/price", response_model=MarketPrice)
async def current_price(ctx: GameContext = Depends(get_context)):
    return await get_price(ctx)


@router.post("/buy", response_model=TradeResponse)
async def buy_btc(
    body: TradeRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    record = await buy(ctx, account_id, body.amount)
    awarded = await check_achievements(ctx, account_id)
    return TradeResponse(transaction=record, account=await get_account(ctx, account_id), new_achievements=awarded)


@router.post("/sell", response_model=TradeResponse)
async def sell_btc(
    body: TradeRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    record = await sell(ctx, account_id, body.amount)
    awarded = await check_achievements(ctx, account_id)
    return TradeResponse(transaction=record, account=await get_account(ctx, account_id), new_achievements=awarded)
