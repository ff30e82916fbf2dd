"""Pydantic schemas for vv_market API responses.

Odds are always recomputed from liquidity at response time; no schema reads a
stored odds figure.
"""

import base64
import json
from decimal import Decimal

from pydantic import BaseModel, Field

from src.vv_market.domain.models import Market, Position
from src.vv_market.domain.odds import MarketStats, MarketSummary

# ---------------------------------------------------------------------------
# Cursor helpers
# ---------------------------------------------------------------------------


def cursor_encode(last_market: Market) -> str:
    """Encode composite cursor from last market in page."""
    payload = {
        "ts": last_market.created_at.isoformat(),  # type: ignore[union-attr]
        "id": last_market.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, market_id), or (None, None) on garbage."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return data["ts"], data["id"]
    except (ValueError, KeyError, TypeError):
        return None, None


class OutcomeOut(BaseModel):
    id: int
    name: str
    odds: float
    odds_display: str
    liquidity: int
    liquidity_display: str


class MarketDetail(BaseModel):
    id: str
    question: str
    description: str | None
    category: str | None
    end_time: str
    time_remaining: str
    total_volume: int
    volume_display: str
    resolved: bool
    winning_outcome: int | None
    min_bet: int | None
    max_bet: int | None
    shield_available: bool
    featured: bool
    outcomes: list[OutcomeOut]

    @classmethod
    def from_domain(cls, m: Market, summary: MarketSummary) -> "MarketDetail":
        return cls(
            id=m.id,
            question=m.question,
            description=m.description,
            category=m.category,
            end_time=m.end_time.isoformat(),
            time_remaining=summary.time_remaining,
            total_volume=m.total_volume,
            volume_display=summary.volume_display,
            resolved=m.resolved,
            winning_outcome=m.winning_outcome,
            min_bet=m.min_bet,
            max_bet=m.max_bet,
            shield_available=m.shield_available,
            featured=m.featured,
            outcomes=[
                OutcomeOut(
                    id=o.id,
                    name=o.name,
                    odds=o.odds,
                    odds_display=o.odds_display,
                    liquidity=o.liquidity,
                    liquidity_display=o.liquidity_display,
                )
                for o in summary.outcomes
            ],
        )


class MarketOddsResponse(BaseModel):
    market_id: str
    total_liquidity: int
    odds: dict[int, float]


class ResolveMarketRequest(BaseModel):
    winning_outcome: int = Field(ge=0)


class PositionOut(BaseModel):
    id: str
    user_id: str
    outcome_id: int
    amount: int
    shield_enabled: bool
    shield_percentage: int
    pnl: Decimal | None

    @classmethod
    def from_domain(cls, p: Position) -> "PositionOut":
        return cls(
            id=p.id,
            user_id=p.user_id,
            outcome_id=p.outcome_id,
            amount=p.amount,
            shield_enabled=p.shield_enabled,
            shield_percentage=p.shield_percentage,
            pnl=p.pnl,
        )


class ResolveMarketResponse(BaseModel):
    market_id: str
    winning_outcome: int
    positions: list[PositionOut]


# ---------------------------------------------------------------------------
# Listing and stats
# ---------------------------------------------------------------------------


class MarketListItem(BaseModel):
    id: str
    question: str
    category: str | None
    featured: bool
    end_time: str
    total_volume: int
    resolved: bool
    winning_outcome: int | None
    odds: dict[int, float]
    created_at: str | None

    @classmethod
    def from_domain(cls, m: Market, odds: dict[int, float]) -> "MarketListItem":
        return cls(
            id=m.id,
            question=m.question,
            category=m.category,
            featured=m.featured,
            end_time=m.end_time.isoformat(),
            total_volume=m.total_volume,
            resolved=m.resolved,
            winning_outcome=m.winning_outcome,
            odds=odds,
            created_at=m.created_at.isoformat() if m.created_at else None,
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
    next_cursor: str | None
    has_more: bool


class MarketStatsResponse(BaseModel):
    market_id: str
    total_volume: int
    position_count: int
    unique_participants: int
    average_bet: int
    liquidity_by_outcome: dict[int, int]
    odds: dict[int, float]

    @classmethod
    def from_domain(cls, s: MarketStats) -> "MarketStatsResponse":
        return cls(
            market_id=s.market_id,
            total_volume=s.total_volume,
            position_count=s.position_count,
            unique_participants=s.unique_participants,
            average_bet=s.average_bet,
            liquidity_by_outcome=s.liquidity_by_outcome,
            odds=s.odds,
        )
