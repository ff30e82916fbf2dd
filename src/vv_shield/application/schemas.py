from decimal import Decimal

from pydantic import BaseModel, Field

from src.vv_common.enums import TokenVersion
from src.vv_shield.domain.analysis import ShieldAnalysis
from src.vv_shield.domain.pricing import ShieldQuote
from src.vv_shield.domain.schedule import FeeSchedule, shield_tier


class ProtectionTierOut(BaseModel):
    level: int
    fee_rate_percent: Decimal
    label: str
    tier: str


class FeeScheduleResponse(BaseModel):
    tiers: list[ProtectionTierOut]

    @classmethod
    def from_domain(cls, schedule: FeeSchedule) -> "FeeScheduleResponse":
        return cls(
            tiers=[
                ProtectionTierOut(
                    level=t.level,
                    fee_rate_percent=t.fee_rate_percent,
                    label=t.label,
                    tier=shield_tier(t.level),
                )
                for t in schedule
            ]
        )


class QuoteRequest(BaseModel):
    stake: int
    level: int
    token_version: TokenVersion | None = None


class QuoteResponse(BaseModel):
    stake: Decimal
    level: int
    fee_rate_percent: Decimal
    protected_amount: Decimal
    fee_amount: Decimal
    discount_percent: int
    discount_amount: Decimal
    payable_fee: Decimal
    total_cost: Decimal

    @classmethod
    def from_domain(cls, q: ShieldQuote) -> "QuoteResponse":
        return cls(
            stake=q.stake,
            level=q.level,
            fee_rate_percent=q.fee_rate_percent,
            protected_amount=q.protected_amount,
            fee_amount=q.fee_amount,
            discount_percent=q.discount_percent,
            discount_amount=q.discount_amount,
            payable_fee=q.payable_fee,
            total_cost=q.total_cost,
        )


class AnalysisRequest(BaseModel):
    stake: int
    level: int
    market_odds: Decimal = Field(description="Implied win probability in percent")


class AnalysisResponse(BaseModel):
    quote: QuoteResponse
    net_stake: Decimal
    potential_win: Decimal
    potential_loss: Decimal
    protected_loss: Decimal
    expected_value: Decimal
    break_even_odds: Decimal
    favorable: bool

    @classmethod
    def from_domain(cls, a: ShieldAnalysis) -> "AnalysisResponse":
        return cls(
            quote=QuoteResponse.from_domain(a.quote),
            net_stake=a.net_stake,
            potential_win=a.potential_win,
            potential_loss=a.potential_loss,
            protected_loss=a.protected_loss,
            expected_value=a.expected_value,
            break_even_odds=a.break_even_odds,
            favorable=a.is_favorable,
        )
