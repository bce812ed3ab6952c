"""NEON companion endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tycoon.auth.dependencies import get_current_account_id
from tycoon.companion.schemas import AskRequest, AttacksResponse, CompanionResponse, MessagesResponse
from tycoon.companion.service import (
    LEGACY_QUESTLINE,
    MAX_LEVEL,
    SHARDS_PER_LEVEL,
    advance_legacy,
    ask,
    complete_quest,
    counter_shadow,
    get_state,
    list_attacks,
    list_messages,
    unlock_bonus,
    upgrade,
)
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import CompanionState, NeonMessage

router = APIRouter(prefix="/api/v1/neon", tags=["NEON"])


def _response(state: CompanionState) -> CompanionResponse:
    progress = state.legacy_quest_progress
    return CompanionResponse(
        state=state,
        upgrade_cost=state.neon_level * SHARDS_PER_LEVEL if state.neon_level < MAX_LEVEL else None,
        counter_cost=state.shadow_threat_level // 2,
        legacy_step=LEGACY_QUESTLINE[progress].description if progress < len(LEGACY_QUESTLINE) else None,
    )


@router.get("", response_model=CompanionResponse)
async def get_companion(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """NEON state; issues a fresh quest and runs SHADOW if due."""
    return _response(await get_state(ctx, account_id))


@router.post("/upgrade", response_model=CompanionResponse)
async def upgrade_neon(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return _response(await upgrade(ctx, account_id))


@router.post("/bonuses/{bonus_id}", response_model=CompanionResponse)
async def unlock(
    bonus_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return _response(await unlock_bonus(ctx, account_id, bonus_id))


@router.post("/quests/{quest_id}/complete", response_model=CompanionResponse)
async def complete(
    quest_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return _response(await complete_quest(ctx, account_id, quest_id))


@router.post("/legacy/advance", response_model=CompanionResponse)
async def legacy(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return _response(await advance_legacy(ctx, account_id))


@router.post("/shadow/counter", response_model=CompanionResponse)
async def counter(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return _response(await counter_shadow(ctx, account_id))


@router.get("/shadow/attacks", response_model=AttacksResponse)
async def attacks(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return AttacksResponse(attacks=await list_attacks(ctx, account_id))


@router.post("/ask", response_model=NeonMessage)
async def ask_neon(
    body: AskRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await ask(ctx, account_id, body.topic)


@router.get("/messages", response_model=MessagesResponse)
async def messages(
    limit: int = Query(50, ge=1, le=200),
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return MessagesResponse(messages=await list_messages(ctx, account_id, limit=limit))
