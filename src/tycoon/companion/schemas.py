"""Request/response schemas for NEON companion endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tycoon.documents import CompanionState, NeonMessage, ShadowAttack


class AskRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=64)


class MessagesResponse(BaseModel):
    messages: list[NeonMessage]


class AttacksResponse(BaseModel):
    attacks: list[ShadowAttack]


class CompanionResponse(BaseModel):
    state: CompanionState
    upgrade_cost: int | None
    counter_cost: int
    legacy_step: str | None
