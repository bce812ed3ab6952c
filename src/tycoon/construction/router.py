"""Farm construction endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tycoon.auth.dependencies import get_current_account_id
from tycoon.construction.schemas import BuildRequest, FarmListResponse, FarmResponse, FarmTemplateResponse
from tycoon.construction.service import (
    FARM_TEMPLATES,
    active_mining_power,
    farm_economics,
    get_farm,
    list_farms,
    remaining_seconds,
    start_build,
)
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.documents import Farm

router = APIRouter(prefix="/api/v1/farms", tags=["Construction"])


def _farm_response(ctx: GameContext, farm: Farm) -> FarmResponse:
    economics = farm_economics(farm, ctx.settings.btc_per_th_per_day)
    return FarmResponse(
        farm=farm,
        remaining_seconds=remaining_seconds(farm, ctx.clock.now()),
        **economics,
    )


@router.get("/templates", response_model=list[FarmTemplateResponse])
async def get_templates():
    return [
        FarmTemplateResponse(
            id=t.id,
            name=t.name,
            level=t.level,
            cost=t.cost,
            mining_power=t.mining_power,
            build_time=t.build_time,
        )
        for t in FARM_TEMPLATES.values()
    ]


@router.get("", response_model=FarmListResponse)
async def get_farms(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """All farms of the caller, with finished constructions already activated."""
    farms = await list_farms(ctx, account_id)
    return FarmListResponse(
        farms=[_farm_response(ctx, f) for f in farms],
        active_mining_power=active_mining_power(farms),
    )


@router.post("", response_model=FarmResponse, status_code=201)
async def build_farm(
    body: BuildRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    farm = await start_build(ctx, account_id, body.template_id)
    return _farm_response(ctx, farm)


@router.get("/{farm_id}", response_model=FarmResponse)
async def get_one_farm(
    farm_id: str,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    farm = await get_farm(ctx, account_id, farm_id)
    return _farm_response(ctx, farm)
