"""Quest endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tycoon.achievements.service import check_achievements
from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import UserQuest
from tycoon.quests.schemas import QuestListResponse, UserQuestListResponse
from tycoon.quests.service import accept, evaluate, get_user_quest, list_quests, list_user_quests

router = APIRouter(prefix="/api/v1/quests", tags=["Quests"])


@router.get("", response_model=QuestListResponse)
async def get_quests(ctx: GameContext = Depends(get_context)):
    return QuestListResponse(quests=await list_quests(ctx))


@router.get("/mine", response_model=UserQuestListResponse)
async def get_my_quests(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return UserQuestListResponse(quests=await list_user_quests(ctx, account_id))


@router.post("/evaluate", response_model=UserQuestListResponse)
async def evaluate_quests(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """Recompute quest progress and pay out any completions."""
    quests = await evaluate(ctx, account_id)
    awarded = await check_achievements(ctx, account_id)
    return UserQuestListResponse(quests=quests, new_achievements=awarded)


@router.post("/{quest_id}/accept", response_model=UserQuest, status_code=201)
async def accept_quest(
    quest_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await accept(ctx, account_id, quest_id)


@router.get("/{quest_id}", response_model=UserQuest)
async def get_my_quest(
    quest_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return await get_user_quest(ctx, account_id, quest_id)
