"""Leaderboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.leaderboard.service import richest_accounts, syndicate_standings

router = APIRouter(prefix="/api/v1/leaderboard", tags=["Leaderboard"])


class LeaderboardEntryResponse(BaseModel):
    rank: int
    id: str
    name: str
    value: float


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntryResponse]


@router.get("/accounts", response_model=LeaderboardResponse)
async def accounts(
    limit: int = Query(10, ge=1, le=100),
    ctx: GameContext = Depends(get_context),
):
    entries = await richest_accounts(ctx, limit=limit)
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse(rank=e.rank, id=e.id, name=e.name, value=e.value) for e in entries]
    )


@router.get("/syndicates", response_model=LeaderboardResponse)
async def syndicates(ctx: GameContext = Depends(get_context)):
    entries = await syndicate_standings(ctx)
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse(rank=e.rank, id=e.id, name=e.name, value=e.value) for e in entries]
    )
