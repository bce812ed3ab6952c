"""Request/response schemas for darkweb endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tycoon.documents import Account, DarkwebEvent, DarkwebItem


class ItemListResponse(BaseModel):
    items: list[DarkwebItem]


class PurchaseResponse(BaseModel):
    item: DarkwebItem
    account: Account


class EventListResponse(BaseModel):
    events: list[DarkwebEvent]


class ContributeRequest(BaseModel):
    amount: float = Field(gt=0)
