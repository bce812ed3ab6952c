"""Darkweb market and event endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.darkweb.schemas import ContributeRequest, EventListResponse, ItemListResponse, PurchaseResponse
from tycoon.darkweb.service import (
    claim_rewards,
    contribute_btc,
    ensure_event,
    join_event,
    list_active_events,
    list_items,
    purchase,
)
from tycoon.dependencies import get_context
from tycoon.documents import DarkwebEvent, LootBundle
from tycoon.ledger.service import get_account

router = APIRouter(prefix="/api/v1/darkweb", tags=["Darkweb"])


@router.get("/items", response_model=ItemListResponse)
async def get_items(ctx: GameContext = Depends(get_context)):
    return ItemListResponse(items=await list_items(ctx))


@router.post("/items/{item_id}/purchase", response_model=PurchaseResponse)
async def buy_item(
    item_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    item = await purchase(ctx, account_id, item_id)
    return PurchaseResponse(item=item, account=await get_account(ctx, account_id))


@router.get("/events", response_model=EventListResponse)
async def get_events(ctx: GameContext = Depends(get_context)):
    """Running events; a new one opens when the last has expired."""
    await ensure_event(ctx)
    return EventListResponse(events=await list_active_events(ctx))


@router.post("/events/{event_id}/join", response_model=DarkwebEvent)
async def join(
    event_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await join_event(ctx, account_id, event_id)


@router.post("/events/{event_id}/contribute", response_model=DarkwebEvent)
async def contribute(
    event_id: str,
    body: ContributeRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await contribute_btc(ctx, account_id, event_id, body.amount)


@router.post("/events/{event_id}/claim", response_model=LootBundle)
async def claim(
    event_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await claim_rewards(ctx, account_id, event_id)
