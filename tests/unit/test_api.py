"""HTTP-level tests: routers, envelope and AppError mapping."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.vv_market.domain.models import Position


class TestShieldEndpoints:
    @pytest.mark.asyncio
    async def test_schedule(self, client):
        resp = await client.get("/api/v1/shield/schedule")
        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert [t["level"] for t in body["data"]["tiers"]] == [10, 20, 30]
        assert body["data"]["tiers"][2]["tier"] == "gold"

    @pytest.mark.asyncio
    async def test_quote(self, client):
        resp = await client.post("/api/v1/shield/quote", json={"stake": 100, "level": 30})
        data = resp.json()["data"]
        assert Decimal(data["protected_amount"]) == 30
        assert Decimal(data["fee_amount"]) == Decimal("6.5")
        assert Decimal(data["total_cost"]) == Decimal("106.5")

    @pytest.mark.asyncio
    async def test_quote_invalid_level(self, client):
        resp = await client.post("/api/v1/shield/quote", json={"stake": 100, "level": 15})
        body = resp.json()
        assert resp.status_code == 422
        assert body["code"] == 5001
        assert body["reason"] == "INVALID_PROTECTION_LEVEL"
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_analysis(self, client):
        resp = await client.post(
            "/api/v1/shield/analysis", json={"stake": 100, "level": 20, "market_odds": "50"}
        )
        data = resp.json()["data"]
        assert Decimal(data["expected_value"]) == 8
        assert data["favorable"] is True


class TestMarketEndpoints:
    @pytest.mark.asyncio
    async def test_detail(self, client):
        resp = await client.get("/api/v1/markets/MKT-1")
        data = resp.json()["data"]
        assert data["volume_display"] == "1K"
        assert [o["odds_display"] for o in data["outcomes"]] == ["75.0%", "25.0%"]

    @pytest.mark.asyncio
    async def test_odds(self, client):
        resp = await client.get("/api/v1/markets/MKT-1/odds")
        assert resp.json()["data"]["odds"] == {"1": 75.0, "2": 25.0}

    @pytest.mark.asyncio
    async def test_list_active(self, client, market_repo):
        resp = await client.get("/api/v1/markets", params={"category": "WEATHER", "limit": 5})
        data = resp.json()["data"]
        assert resp.status_code == 200
        assert [m["id"] for m in data["items"]] == ["MKT-1"]
        assert data["items"][0]["odds"] == {"1": 75.0, "2": 25.0}
        assert data["has_more"] is False
        args = market_repo.list_markets.await_args.args
        assert args[1] is False
        assert args[3] == "WEATHER"
        assert args[-1] == 6

    @pytest.mark.asyncio
    async def test_list_resolved_featured(self, client, market_repo):
        await client.get("/api/v1/markets", params={"status": "RESOLVED", "featured": "true"})
        args = market_repo.list_markets.await_args.args
        assert args[1] is True
        assert args[4] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 101}, {"status": "OPEN"}])
    async def test_list_rejects_bad_query(self, client, params):
        resp = await client.get("/api/v1/markets", params=params)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_stats(self, client, market_repo):
        market_repo.list_positions = AsyncMock(
            return_value=[
                Position("P1", "MKT-1", "0xa", 1, 30),
                Position("P2", "MKT-1", "0xb", 1, 10),
            ]
        )
        resp = await client.get("/api/v1/markets/MKT-1/stats")
        data = resp.json()["data"]
        assert data["position_count"] == 2
        assert data["unique_participants"] == 2
        assert data["average_bet"] == 20
        assert data["liquidity_by_outcome"] == {"1": 40, "2": 0}

    @pytest.mark.asyncio
    async def test_not_found(self, client, market_repo):
        market_repo.get_market_by_id = AsyncMock(return_value=None)
        resp = await client.get("/api/v1/markets/MKT-X")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001


class TestBetEndpoints:
    @pytest.mark.asyncio
    async def test_place_and_confirm(self, client, market_repo):
        resp = await client.post(
            "/api/v1/bets",
            json={
                "market_id": "MKT-1",
                "user_id": "0xuser",
                "outcome": 1,
                "stake": 100,
                "shield_enabled": True,
                "shield_level": 10,
                "client_bet_id": "bet-42",
            },
        )
        data = resp.json()["data"]
        assert data["status"] == "AWAITING_CONFIRMATION"
        assert Decimal(data["total_value"]) == Decimal("102.5")

        resp = await client.post(
            "/api/v1/bets/bet-42/receipt",
            json={"status": "CONFIRMED", "committed_value": "102.5"},
        )
        data = resp.json()["data"]
        assert data["status"] == "CONFIRMED"
        assert data["position"]["outcome_id"] == 2
        market_repo.save_position.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_outcome_is_failed_state(self, client, chain_submitter):
        resp = await client.post(
            "/api/v1/bets",
            json={"market_id": "MKT-1", "user_id": "0xuser", "outcome": 5, "stake": 100},
        )
        data = resp.json()["data"]
        assert resp.status_code == 200
        assert data["status"] == "FAILED"
        assert data["reason"] == "INVALID_OUTCOME"
        chain_submitter.submit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_client_bet_id(self, client):
        body = {
            "market_id": "MKT-1", "user_id": "0xuser", "outcome": 0,
            "stake": 10, "client_bet_id": "dup",
        }
        await client.post("/api/v1/bets", json=body)
        resp = await client.post("/api/v1/bets", json=body)
        assert resp.status_code == 409
        assert resp.json()["reason"] == "ALREADY_IN_PROGRESS"

    @pytest.mark.asyncio
    async def test_unknown_attempt(self, client):
        resp = await client.get("/api/v1/bets/missing")
        assert resp.status_code == 404
        assert resp.json()["code"] == 4003

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        resp = await client.get("/api/v1/shield/schedule")
        assert resp.headers["X-Request-ID"] == resp.json()["request_id"]


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.json()["status"] == "ok"
