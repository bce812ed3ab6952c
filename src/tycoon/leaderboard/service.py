"""Leaderboards built from the live documents."""

from __future__ import annotations

from dataclasses import dataclass

from tycoon.context import GameContext
from tycoon.ledger.service import list_accounts
from tycoon.syndicates.service import list_syndicates


@dataclass
class LeaderboardEntry:
    rank: int
    id: str
    name: str
    value: float


async def richest_accounts(ctx: GameContext, limit: int = 10) -> list[LeaderboardEntry]:
    """Accounts ordered by BTC balance, highest first."""
    accounts = sorted(await list_accounts(ctx), key=lambda a: (-a.btc_balance, a.id))
    return [
        LeaderboardEntry(rank=i, id=a.id, name=a.nickname or a.id[:8], value=a.btc_balance)
        for i, a in enumerate(accounts[:limit], start=1)
    ]


async def syndicate_standings(ctx: GameContext) -> list[LeaderboardEntry]:
    """Syndicates ordered by goal progress, highest first."""
    syndicates = sorted(await list_syndicates(ctx), key=lambda s: (-s.progress, s.id))
    return [
        LeaderboardEntry(rank=i, id=s.id, name=s.name, value=s.progress)
        for i, s in enumerate(syndicates, start=1)
    ]
