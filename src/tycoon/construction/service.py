"""Farm construction scheduling.

Farms are paid for up front and become Active once the wall clock passes
``construction_end``. There is no background timer: ``resolve`` is a pure
function applied on every read path, and the scheduled job runs the same
function for accounts nobody is looking at.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from tycoon.context import GameContext
from tycoon.documents import ACTIVE, UNDER_CONSTRUCTION, Farm
from tycoon.errors import NotFound
from tycoon.ledger.service import debit_btc, load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FarmTemplate:
    id: str
    name: str
    level: int
    cost: float
    mining_power: float
    build_time: int  # seconds


FARM_TEMPLATES: dict[str, FarmTemplate] = {
    "small": FarmTemplate("small", "Small Farm", 1, 10, 5, 300),
    "medium": FarmTemplate("medium", "Medium Farm", 2, 50, 20, 600),
    "large": FarmTemplate("large", "Large Farm", 3, 200, 100, 1200),
}


def get_template(template_id: str) -> FarmTemplate:
    template = FARM_TEMPLATES.get(template_id)
    if template is None:
        raise NotFound(f"Farm template '{template_id}' not found")
    return template


def resolve(farm: Farm, now: datetime) -> Farm:
    """Return the farm with its status as of ``now``. Never mutates ``farm``."""
    if farm.status == UNDER_CONSTRUCTION and now >= farm.construction_end:
        return farm.model_copy(update={"status": ACTIVE})
    return farm


def remaining_seconds(farm: Farm, now: datetime) -> int:
    """Whole seconds until construction ends, never negative."""
    return max(0, math.floor((farm.construction_end - now).total_seconds()))


def farm_economics(farm: Farm, btc_per_th_per_day: float = 0.01) -> dict[str, float]:
    """Display figures for one farm: energy draw, daily profit, monthly upkeep."""
    return {
        "energy_consumption_kw": farm.level * 10,
        "daily_profit_btc": farm.mining_power * btc_per_th_per_day,
        "maintenance_btc_per_month": farm.level * 0.05,
    }


async def start_build(ctx: GameContext, account_id: str, template_id: str) -> Farm:
    """Debit the build cost and create a farm under construction."""
    template = get_template(template_id)

    async def op(uow: UnitOfWork) -> Farm:
        account = await load_account(ctx, uow, account_id)
        cost = template.cost * account.build_cost_multiplier
        debit_btc(account, cost)

        now = ctx.clock.now()
        farm = Farm(
            id=uuid.uuid4().hex,
            name=template.name,
            level=template.level,
            cost=cost,
            mining_power=template.mining_power,
            build_time=template.build_time,
            status=UNDER_CONSTRUCTION,
            construction_end=now + timedelta(seconds=template.build_time),
        )
        uow.save(keys.account(account_id), account)
        uow.save(keys.farm(account_id, farm.id), farm)
        return farm

    farm = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s started %s (farm=%s, ends %s)", account_id, farm.name, farm.id, farm.construction_end)
    return farm


async def load_farms(uow: UnitOfWork, account_id: str, now: datetime) -> list[Farm]:
    """Load an account's farms, staging any construction that has finished."""
    farms = await uow.load_children(keys.farms(account_id), Farm)
    resolved = []
    for farm in farms:
        current = resolve(farm, now)
        if current is not farm:
            uow.save(keys.farm(account_id, farm.id), current)
            logger.info("Farm %s of account %s is now active", farm.id, account_id)
        resolved.append(current)
    return resolved


async def list_farms(ctx: GameContext, account_id: str) -> list[Farm]:
    async def op(uow: UnitOfWork) -> list[Farm]:
        return await load_farms(uow, account_id, ctx.clock.now())

    return await ctx.transact(op, account_id=account_id)


async def get_farm(ctx: GameContext, account_id: str, farm_id: str) -> Farm:
    for farm in await list_farms(ctx, account_id):
        if farm.id == farm_id:
            return farm
    raise NotFound(f"Farm {farm_id} not found")


def active_mining_power(farms: list[Farm]) -> float:
    return sum(farm.mining_power for farm in farms if farm.status == ACTIVE)
