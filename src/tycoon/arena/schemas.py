"""Request/response schemas for Cyber Arena endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from tycoon.documents import ArenaResult, LootBundle


class BonusRequest(BaseModel):
    bonus: str


class DroneView(BaseModel):
    id: str
    type: str
    hp: float
    position: float


class PowerUpView(BaseModel):
    id: str
    type: str
    position: float


class ArenaStateResponse(BaseModel):
    phase: str
    wave: int
    data_core_hp: float
    bonus: str | None
    drones: list[DroneView]
    power_ups: list[PowerUpView]
    laser_cooldown: float
    overclock_remaining: float
    overclock_cooldown: float
    hack_shield_cooldown: float
    waves_completed: int
    rewards: LootBundle
    events: list[str]


class ArenaResultsResponse(BaseModel):
    results: list[ArenaResult]
