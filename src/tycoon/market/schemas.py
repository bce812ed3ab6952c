"""Request/response schemas for market endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tycoon.documents import Account, Achievement, TransactionRecord


class TradeRequest(BaseModel):
    amount: float = Field(gt=0)


class TradeResponse(BaseModel):
    transaction: TransactionRecord
    account: Account
    new_achievements: list[Achievement] = []
