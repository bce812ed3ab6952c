"""Request/response schemas for account endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from tycoon.documents import Account, TransactionRecord, WeeklyStat


class GuestLoginRequest(BaseModel):
    nickname: str = Field(default="", max_length=64)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str


class ProfileUpdateRequest(BaseModel):
    nickname: str | None = Field(default=None, max_length=64)
    avatar: str | None = Field(default=None, max_length=32)


class AccountResponse(BaseModel):
    account: Account
    effective_mining_power: float
    as_of: datetime


class TransactionsResponse(BaseModel):
    transactions: list[TransactionRecord]
    total: int


class WeeklyStatView(WeeklyStat):
    week_start: date
    week_end: date


class WeeklyStatsResponse(BaseModel):
    weeks: list[WeeklyStatView]
