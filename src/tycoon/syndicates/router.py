"""Syndicate endpoints: membership, contribution and chat."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import ChatMessage, Syndicate
from tycoon.errors import NotEligible
from tycoon.mining.service import accrue
from tycoon.syndicates.schemas import ChatPostRequest, ChatResponse, MembershipResponse, SyndicateListResponse
from tycoon.syndicates.service import (
    get_membership,
    get_syndicate,
    join,
    leave,
    list_messages,
    list_syndicates,
    post_message,
    update_contribution,
)

router = APIRouter(prefix="/api/v1/syndicates", tags=["Syndicates"])


async def _membership_response(ctx: GameContext, account_id: str) -> MembershipResponse:
    membership = await get_membership(ctx, account_id)
    syndicate = await get_syndicate(ctx, membership.syndicate_id) if membership.syndicate_id else None
    return MembershipResponse(membership=membership, syndicate=syndicate)


@router.get("", response_model=SyndicateListResponse)
async def get_syndicates(ctx: GameContext = Depends(get_context)):
    return SyndicateListResponse(syndicates=await list_syndicates(ctx))


@router.get("/me", response_model=MembershipResponse)
async def get_my_syndicate(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await _membership_response(ctx, account_id)


@router.post("/leave", status_code=204)
async def leave_syndicate(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    await leave(ctx, account_id)


@router.post("/contribution", response_model=MembershipResponse)
async def refresh_contribution(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """Accrue mining, fold the growth into syndicate progress and pay out a reached goal."""
    await accrue(ctx, account_id)
    await update_contribution(ctx, account_id)
    return await _membership_response(ctx, account_id)


@router.post("/chat", response_model=ChatMessage, status_code=201)
async def post_chat(
    body: ChatPostRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await post_message(ctx, account_id, body.message)


@router.get("/{syndicate_id}", response_model=Syndicate)
async def get_one_syndicate(syndicate_id: str, ctx: GameContext = Depends(get_context)):
    return await get_syndicate(ctx, syndicate_id)


@router.post("/{syndicate_id}/join", response_model=MembershipResponse)
async def join_syndicate(
    syndicate_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    await join(ctx, account_id, syndicate_id)
    return await _membership_response(ctx, account_id)


@router.get("/{syndicate_id}/chat", response_model=ChatResponse)
async def get_chat(
    syndicate_id: str,
    limit: int = Query(50, ge=1, le=200),
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """Members only."""
    membership = await get_membership(ctx, account_id)
    if membership.syndicate_id != syndicate_id:
        raise NotEligible("Join this syndicate to read its chat")
    return ChatResponse(messages=await list_messages(ctx, syndicate_id, limit=limit))
