"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tycoon.arena.service import ArenaSessions
from tycoon.auth.jwt import create_access_token
from tycoon.clock import FrozenClock
from tycoon.companion.service import load_state
from tycoon.config import Settings
from tycoon.context import GameContext
from tycoon.ledger.service import load_account
from tycoon.main import create_app
from tycoon.rng import RandomSource
from tycoon.seed import seed_game_data
from tycoon.store import keys
from tycoon.store.memory import InMemoryStore


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(store_backend="memory", random_seed=7, arena_tick_seconds=0.1)


@pytest_asyncio.fixture
async def ctx(clock: FrozenClock, settings: Settings) -> GameContext:
    """A seeded game over an in-memory store with a frozen clock."""
    game = GameContext(
        store=InMemoryStore(),
        settings=settings,
        clock=clock,
        rng=RandomSource(settings.random_seed),
    )
    await seed_game_data(game)
    return game


@pytest_asyncio.fixture
async def client(ctx: GameContext) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the app, wired to the test context."""
    app = create_app()
    app.state.game = ctx
    app.state.arena = ArenaSessions(ctx)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await app.state.arena.stop_all()


@pytest.fixture
def auth_headers():
    """Build bearer headers for an arbitrary account id."""

    def _headers(account_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(account_id)}"}

    return _headers


@pytest_asyncio.fixture
async def player(client: AsyncClient) -> dict[str, object]:
    """A guest account: its id and auth headers."""
    response = await client.post("/api/v1/accounts/guest", json={"nickname": "Satoshi"})
    assert response.status_code == 201
    data = response.json()
    return {
        "id": data["account_id"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


@pytest.fixture
def edit_account(ctx: GameContext):
    """Set fields on an account (created with the initial grant if missing)."""

    async def _edit(account_id: str, **fields: object) -> None:
        async def op(uow):
            account = await load_account(ctx, uow, account_id)
            for name, value in fields.items():
                setattr(account, name, value)
            uow.save(keys.account(account_id), account)

        await ctx.transact(op)

    return _edit


@pytest.fixture
def edit_neon(ctx: GameContext):
    """Set fields on an account's NEON companion state."""

    async def _edit(account_id: str, **fields: object) -> None:
        async def op(uow):
            state = await load_state(uow, account_id)
            for name, value in fields.items():
                setattr(state, name, value)
            uow.save(keys.neon(account_id), state)

        await ctx.transact(op)

    return _edit
