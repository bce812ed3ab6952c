"""Integration tests for farms, market, quests, achievements and leaderboards."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestFarmsAPI:
    async def test_templates(self, client: AsyncClient, player):
        resp = await client.get("/api/v1/farms/templates", headers=player["headers"])
        assert resp.status_code == 200
        assert [t["id"] for t in resp.json()] == ["small", "medium", "large"]

    async def test_build_until_broke(self, client: AsyncClient, player):
        resp = await client.post("/api/v1/farms", json={"template_id": "small"}, headers=player["headers"])
        assert resp.status_code == 201
        farm = resp.json()
        assert farm["farm"]["status"] == "Under Construction"
        assert farm["remaining_seconds"] == 300

        resp = await client.post("/api/v1/farms", json={"template_id": "small"}, headers=player["headers"])
        assert resp.status_code == 402
        assert resp.json()["error"] == "InsufficientFunds"

        resp = await client.get("/api/v1/farms", headers=player["headers"])
        assert len(resp.json()["farms"]) == 1

    async def test_unknown_template(self, client: AsyncClient, player):
        resp = await client.post("/api/v1/farms", json={"template_id": "mega"}, headers=player["headers"])
        assert resp.status_code == 404


class TestMarketAPI:
    async def test_price(self, client: AsyncClient):
        resp = await client.get("/api/v1/market/price")
        assert resp.status_code == 200
        assert resp.json()["price"] == 45_230.0

    async def test_buy_then_sell(self, client: AsyncClient, player):
        resp = await client.post("/api/v1/market/buy", json={"amount": 0.1}, headers=player["headers"])
        assert resp.status_code == 200
        data = resp.json()
        assert data["account"]["btc_balance"] == pytest.approx(10.1)
        assert data["account"]["usd_balance"] == pytest.approx(10_000 - 4_523)
        assert [a["slug"] for a in data["new_achievements"]] == ["first-transaction"]

        resp = await client.post("/api/v1/market/sell", json={"amount": 0.1}, headers=player["headers"])
        assert resp.status_code == 200
        assert resp.json()["new_achievements"] == []

        resp = await client.get("/api/v1/accounts/me/transactions", headers=player["headers"])
        assert resp.json()["total"] == 2

        resp = await client.get("/api/v1/achievements", headers=player["headers"])
        assert resp.json()["total_earned"] == 1

    async def test_non_positive_amount_rejected(self, client: AsyncClient, player):
        resp = await client.post("/api/v1/market/buy", json={"amount": 0}, headers=player["headers"])
        assert resp.status_code == 422

    async def test_sell_more_than_held(self, client: AsyncClient, player):
        resp = await client.post("/api/v1/market/sell", json={"amount": 50}, headers=player["headers"])
        assert resp.status_code == 402


class TestQuestsAPI:
    async def test_accept_once(self, client: AsyncClient, player):
        resp = await client.get("/api/v1/quests", headers=player["headers"])
        quest_id = resp.json()["quests"][0]["id"]

        resp = await client.post(f"/api/v1/quests/{quest_id}/accept", headers=player["headers"])
        assert resp.status_code == 201
        resp = await client.post(f"/api/v1/quests/{quest_id}/accept", headers=player["headers"])
        assert resp.status_code == 409
        assert resp.json()["error"] == "AlreadyInState"


class TestLeaderboardAPI:
    async def test_accounts(self, client: AsyncClient, player):
        resp = await client.get("/api/v1/leaderboard/accounts")
        assert resp.status_code == 200
        entries = resp.json()["entries"]
        assert entries[0]["id"] == player["id"]
        assert entries[0]["rank"] == 1

    async def test_syndicates(self, client: AsyncClient):
        resp = await client.get("/api/v1/leaderboard/syndicates")
        assert {e["id"] for e in resp.json()["entries"]} == {"syndicate1", "syndicate2"}
