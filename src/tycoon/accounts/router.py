"""Account router: guest login, profile and ledger history."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends

from tycoon.accounts.schemas import (
    AccountResponse,
    GuestLoginRequest,
    ProfileUpdateRequest,
    TokenResponse,
    TransactionsResponse,
    WeeklyStatsResponse,
    WeeklyStatView,
)
from tycoon.auth.dependencies import get_current_account_id
from tycoon.auth.jwt import create_access_token
from tycoon.construction.service import list_farms
from tycoon.context import GameContext
from tycoon.dependencies import get_context
from tycoon.ledger.service import list_weekly_stats, update_profile
from tycoon.market.service import list_transactions
from tycoon.mining.service import accrue, effective_mining_power
from tycoon.week_utils import iso_week_to_dates

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/accounts", tags=["Accounts"])


@router.post("/guest", response_model=TokenResponse, status_code=201)
async def guest_login(body: GuestLoginRequest, ctx: GameContext = Depends(get_context)):
    """Create a fresh account with the initial grant and return its access token."""
    account_id = uuid.uuid4().hex
    await update_profile(ctx, account_id, nickname=body.nickname)
    logger.info("guest_account_created", account_id=account_id)
    return TokenResponse(access_token=create_access_token(account_id), account_id=account_id)


@router.get("/me", response_model=AccountResponse)
async def get_me(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    """The caller's ledger, with mining accrued up to now."""
    account = await accrue(ctx, account_id)
    farms = await list_farms(ctx, account_id)
    return AccountResponse(
        account=account,
        effective_mining_power=effective_mining_power(account, farms),
        as_of=ctx.clock.now(),
    )


@router.patch("/me", response_model=AccountResponse)
async def patch_me(
    body: ProfileUpdateRequest,
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    account = await update_profile(ctx, account_id, nickname=body.nickname, avatar=body.avatar)
    farms = await list_farms(ctx, account_id)
    return AccountResponse(
        account=account,
        effective_mining_power=effective_mining_power(account, farms),
        as_of=ctx.clock.now(),
    )


@router.get("/me/transactions", response_model=TransactionsResponse)
async def get_transactions(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    transactions = await list_transactions(ctx, account_id)
    return TransactionsResponse(transactions=transactions, total=len(transactions))


@router.get("/me/weekly-stats", response_model=WeeklyStatsResponse)
async def get_weekly_stats(
    account_id: str = Depends(get_current_account_id),
    ctx: GameContext = Depends(get_context),
):
    weeks = []
    for stat in await list_weekly_stats(ctx, account_id):
        week_start, week_end = iso_week_to_dates(stat.week_iso)
        weeks.append(WeeklyStatView(**stat.model_dump(), week_start=week_start, week_end=week_end))
    return WeeklyStatsResponse(weeks=weeks)
