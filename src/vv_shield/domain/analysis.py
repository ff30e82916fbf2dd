"""Shield protection analysis: what a shielded stake wins, loses and is worth.

``market_odds`` is the outcome's implied probability in percent (0, 100].
"""

from dataclasses import dataclass
from decimal import Decimal

from src.vv_common.errors import InvalidOddsError
from src.vv_shield.domain.pricing import ShieldQuote, quote_protection
from src.vv_shield.domain.schedule import DEFAULT_FEE_SCHEDULE, FeeSchedule

_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class ShieldAnalysis:
    quote: ShieldQuote
    net_stake: Decimal
    potential_win: Decimal
    potential_loss: Decimal
    protected_loss: Decimal
    expected_value: Decimal
    break_even_odds: Decimal

    @property
    def is_favorable(self) -> bool:
        return self.expected_value > 0


def analyze_protection(
    stake: int | Decimal,
    level: int,
    market_odds: int | Decimal,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> ShieldAnalysis:
    odds = Decimal(market_odds)
    if not (0 < odds <= 100):
        raise InvalidOddsError(market_odds)
    quote = quote_protection(stake, level, schedule)

    net_stake = quote.stake - quote.fee_amount
    potential_win = net_stake * _HUNDRED / odds - net_stake
    potential_loss = quote.stake
    protected_loss = potential_loss - quote.protected_amount

    win_probability = odds / _HUNDRED
    expected_value = (
        win_probability * potential_win - (1 - win_probability) * protected_loss
    )
    break_even_odds = net_stake / (net_stake + protected_loss) * _HUNDRED

    return ShieldAnalysis(
        quote=quote,
        net_stake=net_stake,
        potential_win=potential_win,
        potential_loss=potential_loss,
        protected_loss=protected_loss,
        expected_value=expected_value,
        break_even_odds=break_even_odds,
    )
