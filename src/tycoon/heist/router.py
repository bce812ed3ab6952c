"""Weekly CryptoBank heist endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import HeistEvent, PrisonStatus
from tycoon.heist.schemas import AdvanceRequest
from tycoon.heist.service import advance, get_event, get_prison_status, join

router = APIRouter(prefix="/api/v1/heist", tags=["Heist"])


@router.get("", response_model=HeistEvent)
async def current_event(ctx: GameContext = Depends(get_context)):
    """This week's event; an expired one is reset on read."""
    return await get_event(ctx)


@router.post("/join", response_model=HeistEvent)
async def join_heist(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await join(ctx, account_id)


@router.post("/advance", response_model=HeistEvent)
async def advance_heist(
    body: AdvanceRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await advance(ctx, account_id, action_id=body.action_id)


@router.get("/prison", response_model=PrisonStatus)
async def prison_status(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await get_prison_status(ctx, account_id)
