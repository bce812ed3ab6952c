"""Scheduled game jobs.

Every job runs the same lazy resolvers the read paths use, so the world
keeps moving for accounts nobody is looking at. Jobs are idempotent: a
missed or doubled run only shifts when a transition is applied, never what
it does.
"""

from __future__ import annotations

import logging

from tycoon.companion.service import shadow_tick
from tycoon.config import get_settings
from tycoon.context import GameContext, create_context
from tycoon.darkweb.service import ensure_event
from tycoon.database import close_db, init_db
from tycoon.errors import GameError
from tycoon.heist.service import get_event
from tycoon.ledger.service import list_accounts
from tycoon.market.service import get_price
from tycoon.mining.service import accrue
from tycoon.redis_client import close_redis, init_redis
from tycoon.store import keys
from tycoon.syndicates.service import get_membership, update_contribution

logger = logging.getLogger(__name__)


async def worker_startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize the store backend on worker startup."""
    settings = get_settings()
    if settings.store_backend == "sql":
        await init_db(settings.database_url)
        await init_redis(settings.redis_url)
    ctx["game"] = create_context(settings)
    logger.info("Game worker started (store=%s)", settings.store_backend)


async def worker_shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    game: GameContext | None = ctx.get("game")
    if game is not None:
        await game.store.close()
    if get_settings().store_backend == "sql":
        await close_db()
        await close_redis()
    logger.info("Game worker shut down")


async def reset_heist(ctx: dict) -> str:  # type: ignore[type-arg]
    """Every minute: replace an expired weekly heist with the current week's."""
    event = await get_event(ctx["game"])
    return event.event_id


async def tick_market(ctx: dict) -> float:  # type: ignore[type-arg]
    """Every minute: apply the price ticks elapsed since the last one."""
    market = await get_price(ctx["game"])
    return market.price


async def refresh_accounts(ctx: dict) -> int:  # type: ignore[type-arg]
    """Every 5 minutes: activate finished farms, accrue mining, fold syndicate contributions."""
    game: GameContext = ctx["game"]
    refreshed = 0
    for account in await list_accounts(game):
        try:
            await accrue(game, account.id)
            membership = await get_membership(game, account.id)
            if membership.syndicate_id:
                await update_contribution(game, account.id)
            refreshed += 1
        except GameError:
            logger.exception("Failed to refresh account %s", account.id)
    logger.info("Refreshed %d accounts", refreshed)
    return refreshed


async def run_shadow(ctx: dict) -> int:  # type: ignore[type-arg]
    """Hourly: give SHADOW its turn against every account that has met NEON."""
    game: GameContext = ctx["game"]
    attacks = 0
    for account in await list_accounts(game):
        if await game.store.get(keys.neon(account.id)) is None:
            continue
        try:
            if await shadow_tick(game, account.id) is not None:
                attacks += 1
        except GameError:
            logger.exception("SHADOW tick failed for account %s", account.id)
    if attacks:
        logger.info("SHADOW attacked %d accounts", attacks)
    return attacks


async def open_darkweb_event(ctx: dict) -> str:  # type: ignore[type-arg]
    """Hourly: make sure a darkweb event is running."""
    event = await ensure_event(ctx["game"])
    return event.id
