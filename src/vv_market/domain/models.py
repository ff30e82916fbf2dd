"""Domain models for vv_market — frozen dataclasses, changed only through transitions.py."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Outcome:
    id: int
    name: str
    liquidity: int = 0  # cumulative stake backing this outcome

    def __post_init__(self) -> None:
        if self.liquidity < 0:
            raise ValueError(f"Outcome {self.id} liquidity must be non-negative")


@dataclass(frozen=True)
class Market:
    id: str
    question: str
    outcomes: tuple[Outcome, ...]
    end_time: datetime
    total_volume: int = 0
    resolved: bool = False
    winning_outcome: int | None = None  # index into outcomes, set iff resolved
    description: str | None = None
    category: str | None = None
    min_bet: int | None = None
    max_bet: int | None = None
    shield_available: bool = True
    featured: bool = False
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if len(self.outcomes) < 2:
            raise ValueError(f"Market {self.id} needs at least 2 outcomes")
        ids = [o.id for o in self.outcomes]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Market {self.id} has duplicate outcome ids: {ids}")
        if self.total_volume < 0:
            raise ValueError(f"Market {self.id} total_volume must be non-negative")
        if self.resolved != (self.winning_outcome is not None):
            raise ValueError("winning_outcome must be set exactly when the market is resolved")
        if self.winning_outcome is not None and not self.has_index(self.winning_outcome):
            raise ValueError(f"winning_outcome {self.winning_outcome} out of range")

    @property
    def total_liquidity(self) -> int:
        return sum(o.liquidity for o in self.outcomes)

    def has_index(self, index: int) -> bool:
        return 0 <= index < len(self.outcomes)

    def find_outcome(self, outcome_id: int) -> Outcome | None:
        return next((o for o in self.outcomes if o.id == outcome_id), None)

    def is_open(self, now: datetime) -> bool:
        return not self.resolved and self.end_time > now


@dataclass(frozen=True)
class Position:
    id: str
    market_id: str
    user_id: str
    outcome_id: int
    amount: int
    shield_enabled: bool = False
    shield_percentage: int = 0
    created_at: datetime | None = None
    pnl: Decimal | None = None  # attached after resolution

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"Position {self.id} amount must be positive")
        if not self.shield_enabled and self.shield_percentage != 0:
            raise ValueError("shield_percentage must be 0 when shield is disabled")

    @property
    def protected_amount(self) -> Decimal:
        return Decimal(self.amount) * self.shield_percentage / 100
