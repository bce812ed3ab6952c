"""Achievement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tycoon.achievements.service import ACHIEVEMENTS, check_achievements, list_achievements
from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import Achievement

router = APIRouter(prefix="/api/v1/achievements", tags=["Achievements"])


class AchievementsResponse(BaseModel):
    earned: list[Achievement]
    total_available: int
    total_earned: int


@router.get("", response_model=AchievementsResponse)
async def my_achievements(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """Earned achievements, awarding any the account now qualifies for."""
    await check_achievements(ctx, account_id)
    earned = await list_achievements(ctx, account_id)
    return AchievementsResponse(earned=earned, total_available=len(ACHIEVEMENTS), total_earned=len(earned))
