"""Shared FastAPI dependencies for the game context and arena sessions."""

from __future__ import annotations

from fastapi import Request

from tycoon.arena.service import ArenaSessions
from tycoon.context import GameContext


def get_context(request: Request) -> GameContext:
    """The game context created in the application lifespan."""
    return request.app.state.game


def get_arena_sessions(request: Request) -> ArenaSessions:
    return request.app.state.arena
