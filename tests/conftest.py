"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.vv_bet.api.router import get_bet_service
from src.vv_bet.application.service import BetApplicationService
from src.vv_bet.domain.chain import PendingHandle
from src.vv_common.database import get_db_session
from src.vv_market.api.router import get_market_service
from src.vv_market.application.service import MarketApplicationService
from src.vv_market.domain.models import Market, Outcome


async def _fake_db():
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    yield db


@pytest.fixture
def market_repo() -> MagicMock:
    """Repository mock serving one open two-outcome market with 1000 in liquidity."""
    market = Market(
        id="MKT-1",
        question="Will it rain?",
        outcomes=(Outcome(1, "Yes", 750), Outcome(2, "No", 250)),
        end_time=datetime.now(UTC) + timedelta(days=3),
        total_volume=1000,
        category="WEATHER",
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )
    repo = MagicMock()
    repo.get_market_by_id = AsyncMock(return_value=market)
    repo.get_market_for_update = AsyncMock(return_value=market)
    repo.list_markets = AsyncMock(return_value=[market])
    repo.list_positions = AsyncMock(return_value=[])
    repo.save_position = AsyncMock()
    return repo


@pytest.fixture
def chain_submitter() -> MagicMock:
    chain = MagicMock()
    chain.submit = AsyncMock(return_value=PendingHandle("0xtx"))
    return chain


@pytest.fixture
async def client(market_repo, chain_submitter) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints without a database or relayer."""
    markets = MarketApplicationService(repo=market_repo)
    bets = BetApplicationService(chain=chain_submitter, markets=markets)
    app.dependency_overrides[get_db_session] = _fake_db
    app.dependency_overrides[get_market_service] = lambda: markets
    app.dependency_overrides[get_bet_service] = lambda: bets
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
