"""Request/response schemas for syndicate endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tycoon.documents import ChatMessage, Membership, Syndicate


class SyndicateListResponse(BaseModel):
    syndicates: list[Syndicate]


class MembershipResponse(BaseModel):
    membership: Membership
    syndicate: Syndicate | None = None


class ChatPostRequest(BaseModel):
    message: str = Field(min_length=1, max_length=500)


class ChatResponse(BaseModel):
    messages: list[ChatMessage]
