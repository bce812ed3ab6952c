"""Cyber Arena endpoints.

The run itself ticks in the background; these endpoints only read it and
apply player actions between ticks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tycoon.arena.engine import ArenaRun
from tycoon.arena.schemas import ArenaResultsResponse, ArenaStateResponse, BonusRequest, DroneView, PowerUpView
from tycoon.arena.service import ArenaSessions, list_results
from tycoon.auth.dependencies import get_current_account_id
from tycoon.context import GameContext
from tycoon.dependencies import get_arena_sessions, get_context

router = APIRouter(prefix="/api/v1/arena", tags=["Arena"])

RECENT_EVENTS = 10


def _state(run: ArenaRun) -> ArenaStateResponse:
    return ArenaStateResponse(
        phase=run.phase,
        wave=run.wave,
        data_core_hp=run.data_core_hp,
        bonus=run.bonus,
        drones=[DroneView(id=d.id, type=d.type, hp=d.hp, position=d.position) for d in run.drones],
        power_ups=[PowerUpView(id=p.id, type=p.type, position=p.position) for p in run.power_ups],
        laser_cooldown=run.laser_cooldown,
        overclock_remaining=run.overclock_remaining,
        overclock_cooldown=run.overclock_cooldown,
        hack_shield_cooldown=run.hack_shield_cooldown,
        waves_completed=run.waves_completed,
        rewards=run.rewards,
        events=run.events[-RECENT_EVENTS:],
    )


@router.post("/start", response_model=ArenaStateResponse, status_code=201)
async def start_run(
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    """Pay the entry fee and open a run in the preparation phase."""
    return _state(await sessions.start(account_id))


@router.get("/state", response_model=ArenaStateResponse)
async def run_state(
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    return _state(sessions.get(account_id))


@router.post("/bonus", response_model=ArenaStateResponse)
async def select_bonus(
    body: BonusRequest,
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    run = sessions.get(account_id)
    run.select_bonus(body.bonus)
    return _state(run)


@router.post("/wave", response_model=ArenaStateResponse)
async def start_wave(
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    run = sessions.get(account_id)
    run.start_wave()
    return _state(run)


@router.post("/laser", response_model=ArenaStateResponse)
async def fire_laser(
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    run = sessions.get(account_id)
    run.fire_laser()
    return _state(run)


@router.post("/overclock", response_model=ArenaStateResponse)
async def overclock(
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    run = sessions.get(account_id)
    run.activate_overclock()
    return _state(run)


@router.post("/hack-shield", response_model=ArenaStateResponse)
async def hack_shield(
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    run = sessions.get(account_id)
    run.activate_hack_shield()
    return _state(run)


@router.post("/power-ups/{power_up_id}", response_model=ArenaStateResponse)
async def pick_power_up(
    power_up_id: str,
    account_id: str = Depends(get_current_account_id),
    sessions: ArenaSessions = Depends(get_arena_sessions),
):
    run = sessions.get(account_id)
    run.pick_power_up(power_up_id)
    return _state(run)


@router.get("/results", response_model=ArenaResultsResponse)
async def results(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    return ArenaResultsResponse(results=await list_results(ctx, account_id))
