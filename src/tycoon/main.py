"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tycoon.accounts.router import router as accounts_router
from tycoon.achievements.router import router as achievements_router
from tycoon.arena.router import router as arena_router
from tycoon.arena.service import ArenaSessions
from tycoon.companion.router import router as companion_router
from tycoon.config import get_settings
from tycoon.construction.router import router as construction_router
from tycoon.context import create_context
from tycoon.darkweb.router import router as darkweb_router
from tycoon.database import close_db, init_db
from tycoon.health.router import router as health_router
from tycoon.heist.router import router as heist_router
from tycoon.leaderboard.router import router as leaderboard_router
from tycoon.market.router import router as market_router
from tycoon.middleware import setup_middleware
from tycoon.quests.router import router as quests_router
from tycoon.redis_client import close_redis, init_redis
from tycoon.seed import seed_game_data
from tycoon.syndicates.router import router as syndicates_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    if settings.store_backend == "sql":
        await init_db(settings.database_url)
        await init_redis(settings.redis_url)

    ctx = create_context(settings)
    await seed_game_data(ctx)
    app.state.game = ctx
    app.state.arena = ArenaSessions(ctx)

    yield

    # Unfinished arena runs are flushed as failed before the store goes away
    await app.state.arena.stop_all()
    await ctx.store.close()
    if settings.store_backend == "sql":
        await close_db()
        await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Bitcoin Tycoon API",
        description="Game server for Bitcoin Tycoon: farms, market, syndicates, heists, NEON and the Cyber Arena",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(accounts_router)
    app.include_router(construction_router)
    app.include_router(market_router)
    app.include_router(quests_router)
    app.include_router(syndicates_router)
    app.include_router(heist_router)
    app.include_router(companion_router)
    app.include_router(arena_router)
    app.include_router(darkweb_router)
    app.include_router(achievements_router)
    app.include_router(leaderboard_router)

    return app


app = create_app()
