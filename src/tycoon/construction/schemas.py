"""Request/response schemas for farm construction endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from tycoon.documents import Farm


class FarmTemplateResponse(BaseModel):
    id: str
    name: str
    level: int
    cost: float
    mining_power: float
    build_time: int


class BuildRequest(BaseModel):
    template_id: str


class FarmResponse(BaseModel):
    farm: Farm
    remaining_seconds: int
    energy_consumption_kw: float
    daily_profit_btc: float
    maintenance_btc_per_month: float


class FarmListResponse(BaseModel):
    farms: list[FarmResponse]
    active_mining_power: float
