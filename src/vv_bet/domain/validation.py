"""Bet validation rules: each raises an AppError carrying its FailureReason.

Checked in order: stake, outcome, market open, shield level. Nothing here
talks to the chain.
"""

from collections.abc import Mapping
from datetime import datetime

from src.vv_bet.domain.states import BetRequest, ValidatedBet
from src.vv_common.enums import TokenVersion
from src.vv_common.errors import (
    InvalidOutcomeError,
    InvalidProtectionLevelError,
    InvalidStakeError,
    MarketClosedError,
)
from src.vv_market.domain.models import Market
from src.vv_shield.domain.pricing import quote_protection
from src.vv_shield.domain.schedule import DEFAULT_TOKEN_DISCOUNTS, FeeSchedule


def check_stake(stake: int, market: Market) -> None:
    if stake <= 0:
        raise InvalidStakeError(f"stake must be positive, got {stake}")
    if market.min_bet is not None and stake < market.min_bet:
        raise InvalidStakeError(f"stake {stake} below market minimum {market.min_bet}")
    if market.max_bet is not None and stake > market.max_bet:
        raise InvalidStakeError(f"stake {stake} above market maximum {market.max_bet}")


def check_outcome(outcome: int, market: Market) -> None:
    if not market.has_index(outcome):
        raise InvalidOutcomeError(outcome, len(market.outcomes))


def check_market_open(market: Market, now: datetime) -> None:
    if not market.is_open(now):
        raise MarketClosedError(market.id)


def validate_bet(
    request: BetRequest,
    market: Market,
    schedule: FeeSchedule,
    now: datetime,
    token_discounts: Mapping[TokenVersion, int] = DEFAULT_TOKEN_DISCOUNTS,
) -> ValidatedBet:
    check_stake(request.stake, market)
    check_outcome(request.outcome, market)
    check_market_open(market, now)

    quote = None
    if request.shield_enabled:
        if not market.shield_available:
            raise InvalidProtectionLevelError(request.shield_level, [])
        quote = quote_protection(
            request.stake,
            request.shield_level,
            schedule,
            token_version=request.token_version,
            token_discounts=token_discounts,
        )
    return ValidatedBet(
        request=request,
        outcome_id=market.outcomes[request.outcome].id,
        quote=quote,
    )
