"""Shield pricing — protected amount and fee for a stake at a protection level.

Decimal arithmetic only: the quote shown before the user commits funds must be
reproducible bit-for-bit by the settlement side.

    protected_amount = stake * level / 100
    fee_amount       = stake * fee_rate(level) / 100
    discount_amount  = fee_amount * token_discount / 100
    payable_fee      = fee_amount - discount_amount
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from src.vv_common.enums import TokenVersion
from src.vv_common.errors import InvalidStakeError
from src.vv_shield.domain.schedule import (
    DEFAULT_FEE_SCHEDULE,
    DEFAULT_TOKEN_DISCOUNTS,
    FeeSchedule,
)

_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class ShieldQuote:
    stake: Decimal
    level: int
    fee_rate_percent: Decimal
    protected_amount: Decimal
    fee_amount: Decimal
    discount_percent: int = 0
    discount_amount: Decimal = Decimal(0)

    @property
    def payable_fee(self) -> Decimal:
        return self.fee_amount - self.discount_amount

    @property
    def total_cost(self) -> Decimal:
        """Stake plus the fee actually charged: the value committed on chain."""
        return self.stake + self.payable_fee


def quote_protection(
    stake: int | Decimal,
    level: int,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    token_version: TokenVersion | None = None,
    token_discounts: Mapping[TokenVersion, int] = DEFAULT_TOKEN_DISCOUNTS,
) -> ShieldQuote:
    """Quote Shield cover for ``stake`` at ``level``.

    Raises:
        InvalidStakeError: stake is not positive.
        InvalidProtectionLevelError: level is not in the schedule.
    """
    amount = Decimal(stake)
    if amount <= 0:
        raise InvalidStakeError(f"stake must be positive, got {stake}")
    fee_rate = schedule.fee_rate(level)

    protected_amount = amount * level / _HUNDRED
    fee_amount = amount * fee_rate / _HUNDRED

    discount_percent = token_discounts.get(token_version, 0) if token_version else 0
    discount_amount = (
        fee_amount * discount_percent / _HUNDRED if discount_percent else Decimal(0)
    )
    return ShieldQuote(
        stake=amount,
        level=level,
        fee_rate_percent=fee_rate,
        protected_amount=protected_amount,
        fee_amount=fee_amount,
        discount_percent=discount_percent,
        discount_amount=discount_amount,
    )
