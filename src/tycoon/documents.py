"""Pydantic models for every stored document.

Each model is serialised with ``model_dump(mode="json")`` into the document
store; keys are built in ``tycoon.store.keys``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

# --- Ledger ---


class Account(BaseModel):
    id: str
    nickname: str = ""
    avatar: str = "icon1"
    btc_balance: float = 0.0
    usd_balance: float = 0.0
    mining_power: float = 0.0
    transactions: int = 0
    build_cost_multiplier: float = 1.0
    mining_power_multiplier: float = 1.0
    total_mined_btc: float = 0.0
    largest_transaction: float = 0.0
    items: list[str] = Field(default_factory=list)
    last_mined_at: datetime | None = None
    created_at: datetime | None = None


class Reward(BaseModel):
    btc: float = 0.0
    mining_power: float = 0.0


class TransactionRecord(BaseModel):
    id: str
    type: Literal["buy", "sell"]
    amount: float
    price: float
    timestamp: datetime


class WeeklyStat(BaseModel):
    week_iso: str
    btc_earned: float = 0.0
    quests_completed: int = 0
    trades: int = 0


# --- Construction ---

UNDER_CONSTRUCTION = "Under Construction"
ACTIVE = "Active"


class Farm(BaseModel):
    id: str
    name: str
    level: int
    cost: float
    mining_power: float
    build_time: int
    status: Literal["Under Construction", "Active"] = UNDER_CONSTRUCTION
    construction_end: datetime


# --- Market ---


class MarketPrice(BaseModel):
    price: float
    last_tick: datetime


# --- Quests ---


class QuestTemplate(BaseModel):
    id: str
    name: str
    description: str
    type: str
    target: float
    reward: Reward


class UserQuest(BaseModel):
    quest_id: str
    status: Literal["accepted", "completed"] = "accepted"
    progress: float = 0.0
    accepted_at: datetime | None = None
    completed_at: datetime | None = None


# --- Syndicates ---


class SyndicateGoal(BaseModel):
    type: str
    target: float


class Syndicate(BaseModel):
    id: str
    name: str
    description: str = ""
    goal: SyndicateGoal
    progress: float = 0.0
    reward: Reward
    members: list[str] = Field(default_factory=list)


class Membership(BaseModel):
    syndicate_id: str = ""
    contribution: float = 0.0
    baseline: float = 0.0


class ChatMessage(BaseModel):
    id: str
    account_id: str
    user_name: str
    message: str
    timestamp: datetime


# --- Weekly heist ---


class BankDefenses(BaseModel):
    firewall: int = 80
    guards: int = 50
    alarms: int = 70


class HeistEvent(BaseModel):
    event_id: str
    start_time: datetime
    end_time: datetime
    stage: str = "observation"
    progress: float = 0.0
    participants: list[str] = Field(default_factory=list)
    bank_defenses: BankDefenses = Field(default_factory=BankDefenses)
    success_chance: float = 0.0
    reward: Reward = Field(default_factory=lambda: Reward(btc=500, mining_power=100))
    applied_actions: list[str] = Field(default_factory=list)
    outcome: Literal["success", "failure"] | None = None


class PrisonStatus(BaseModel):
    in_prison: bool = False
    prison_end_time: datetime | None = None

    def is_imprisoned(self, now: datetime) -> bool:
        return self.in_prison and self.prison_end_time is not None and now < self.prison_end_time


# --- Companion (NEON) ---


class NeonReward(BaseModel):
    btc: float = 0.0
    mining_power: float = 0.0
    item: str | None = None


class NeonQuest(BaseModel):
    id: str
    description: str
    deadline: datetime
    reward: NeonReward


class CompanionState(BaseModel):
    neon_level: int = 1
    loyalty_points: int = 0
    shards: int = 0
    active_quests: list[NeonQuest] = Field(default_factory=list)
    unlocked_bonuses: list[str] = Field(default_factory=list)
    legacy_quest_progress: int = 0
    shadow_threat_level: int = 0
    shadow_attack_cooldown: datetime | None = None
    cyber_arena_cooldown: datetime | None = None


class NeonMessage(BaseModel):
    id: str
    message: str
    type: Literal["quest", "reaction", "tip"]
    timestamp: datetime


class ShadowAttack(BaseModel):
    id: str
    attack_type: Literal["miningPowerReduction", "btcTheft"]
    damage: float
    timestamp: datetime


# --- Arena ---


class LootBundle(BaseModel):
    btc: float = 0.0
    shards: int = 0
    items: list[str] = Field(default_factory=list)


class ArenaResult(BaseModel):
    id: str
    waves_completed: int
    rewards: LootBundle
    outcome: Literal["complete", "failed"]
    timestamp: datetime


# --- Darkweb ---


class ItemEffect(BaseModel):
    type: Literal["miningPower", "buildCostMultiplier"]
    value: float


class DarkwebItem(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float
    effect: ItemEffect


class EventTask(BaseModel):
    description: str
    target: float
    progress: float = 0.0


class DarkwebEvent(BaseModel):
    id: str
    name: str
    description: str
    deadline: datetime
    tasks: list[EventTask]
    rewards: LootBundle
    participants: list[str] = Field(default_factory=list)
    claimed_by: list[str] = Field(default_factory=list)


# --- Achievements ---


class Achievement(BaseModel):
    slug: str
    name: str
    description: str
    awarded_at: datetime
