"""Odds/volume aggregation — derived on every read, never stored.

odds(outcome) = outcome.liquidity / total_liquidity * 100, and 0 for every
outcome while the market has no liquidity at all.
"""

from dataclasses import dataclass
from datetime import datetime

from src.vv_common.amounts import format_amount, format_compact, format_percentage
from src.vv_common.datetime_utils import format_time_remaining
from src.vv_market.domain.models import Market, Outcome, Position


def compute_odds(outcome: Outcome, market: Market) -> float:
    total = market.total_liquidity
    if total == 0:
        return 0.0
    return outcome.liquidity / total * 100


def market_odds(market: Market) -> dict[int, float]:
    return {o.id: compute_odds(o, market) for o in market.outcomes}


@dataclass(frozen=True)
class OutcomeSummary:
    id: int
    name: str
    odds: float
    odds_display: str
    liquidity: int
    liquidity_display: str


@dataclass(frozen=True)
class MarketSummary:
    market_id: str
    question: str
    outcomes: list[OutcomeSummary]
    total_volume: int
    volume_display: str
    time_remaining: str
    resolved: bool


def summarize_market(market: Market, now: datetime) -> MarketSummary:
    outcomes = []
    for o in market.outcomes:
        odds = compute_odds(o, market)
        outcomes.append(
            OutcomeSummary(
                id=o.id,
                name=o.name,
                odds=odds,
                odds_display=format_percentage(odds),
                liquidity=o.liquidity,
                liquidity_display=format_amount(o.liquidity),
            )
        )
    return MarketSummary(
        market_id=market.id,
        question=market.question,
        outcomes=outcomes,
        total_volume=market.total_volume,
        volume_display=format_compact(market.total_volume),
        time_remaining="Resolved" if market.resolved else format_time_remaining(market.end_time, now),
        resolved=market.resolved,
    )


@dataclass(frozen=True)
class MarketStats:
    market_id: str
    total_volume: int
    position_count: int
    unique_participants: int
    average_bet: int
    liquidity_by_outcome: dict[int, int]
    odds: dict[int, float]


def compute_market_stats(market: Market, positions: list[Position]) -> MarketStats:
    """Aggregate the recorded positions of one market.

    Volume and per-outcome liquidity are summed from the positions themselves;
    average_bet floors. Every outcome appears in liquidity_by_outcome, 0 if unbacked.
    """
    liquidity = {o.id: 0 for o in market.outcomes}
    total = 0
    for p in positions:
        liquidity[p.outcome_id] = liquidity.get(p.outcome_id, 0) + p.amount
        total += p.amount
    count = len(positions)
    return MarketStats(
        market_id=market.id,
        total_volume=total,
        position_count=count,
        unique_participants=len({p.user_id for p in positions}),
        average_bet=total // count if count else 0,
        liquidity_by_outcome=liquidity,
        odds=market_odds(market),
    )
