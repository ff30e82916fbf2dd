"""Pure market transitions — every function returns a new Market/Position.

Position application and resolution are mutually exclusive: once a market is
resolved, apply_position is rejected. Resolution is one-way.
"""

import logging
from dataclasses import replace
from decimal import Decimal

from src.vv_common.errors import (
    AlreadyResolvedError,
    InvalidOutcomeError,
    MarketAlreadyResolvedError,
    MarketNotResolvedError,
    UnknownOutcomeError,
)
from src.vv_market.domain.models import Market, Outcome, Position

logger = logging.getLogger(__name__)


def apply_position(market: Market, position: Position) -> Market:
    """Credit a confirmed position to its outcome's liquidity and the market volume."""
    if market.resolved:
        raise MarketAlreadyResolvedError(market.id)
    if market.find_outcome(position.outcome_id) is None:
        raise UnknownOutcomeError(market.id, position.outcome_id)

    outcomes = tuple(
        replace(o, liquidity=o.liquidity + position.amount)
        if o.id == position.outcome_id
        else o
        for o in market.outcomes
    )
    logger.debug(
        "Applied position %s: market=%s outcome=%s amount=%d",
        position.id, market.id, position.outcome_id, position.amount,
    )
    return replace(
        market,
        outcomes=outcomes,
        total_volume=market.total_volume + position.amount,
    )


def resolve_market(market: Market, winning_outcome: int) -> Market:
    """Mark ``winning_outcome`` (an index into market.outcomes) as the result."""
    if market.resolved:
        raise AlreadyResolvedError(market.id)
    if not market.has_index(winning_outcome):
        raise InvalidOutcomeError(winning_outcome, len(market.outcomes))
    logger.info("Market %s resolved: winning_outcome=%d", market.id, winning_outcome)
    return replace(market, resolved=True, winning_outcome=winning_outcome)


def winning(market: Market) -> Outcome:
    if not market.resolved or market.winning_outcome is None:
        raise MarketNotResolvedError(market.id)
    return market.outcomes[market.winning_outcome]


def settle_positions(market: Market, positions: list[Position]) -> list[Position]:
    """Attach pnl to every position of a resolved market (pari-mutuel payout).

    Shield refunds of losing positions are paid out of the volume first; winners
    split what remains pro rata: payout = amount * pool // winning liquidity.
    Net pnl across a fully listed market is therefore never positive.
    Positions that already carry pnl are returned unchanged.
    """
    winner = winning(market)
    for p in positions:
        if p.market_id != market.id:
            raise ValueError(f"Position {p.id} belongs to market {p.market_id}, not {market.id}")

    refunds = sum(
        (p.protected_amount for p in positions if p.outcome_id != winner.id),
        Decimal(0),
    )
    pool = Decimal(market.total_volume) - refunds

    settled: list[Position] = []
    for p in positions:
        if p.pnl is not None:
            settled.append(p)
            continue
        if p.outcome_id == winner.id:
            # winner.liquidity > 0 whenever a winning position exists
            payout = Decimal(p.amount) * pool // winner.liquidity
            pnl = payout - p.amount
        else:
            pnl = p.protected_amount - p.amount
        settled.append(replace(p, pnl=pnl))
    logger.info(
        "Settled market %s: pool %s after %s in shield refunds", market.id, pool, refunds
    )
    return settled
