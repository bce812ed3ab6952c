"""Request/response schemas for heist endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AdvanceRequest(BaseModel):
    # Clients retrying a request resend the same id; the step is applied once
    action_id: str | None = Field(default=None, max_length=64)
