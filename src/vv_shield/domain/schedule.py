"""Shield fee schedule — explicit {level: tier} table, injected into pricing.

Pricing code never hard-codes levels or rates; swap the schedule to reprice.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal

from config.settings import Settings, settings
from src.vv_common.enums import TokenVersion
from src.vv_common.errors import InvalidProtectionLevelError


@dataclass(frozen=True)
class ProtectionTier:
    level: int  # percent of stake refunded on a losing position
    fee_rate_percent: Decimal  # percent of stake charged for the cover
    label: str


class FeeSchedule:
    """Immutable protection-level table, iterable in ascending level order."""

    def __init__(self, tiers: Mapping[int, ProtectionTier]) -> None:
        if not tiers:
            raise ValueError("Fee schedule needs at least one protection tier")
        for level, tier in tiers.items():
            if level != tier.level:
                raise ValueError(f"Tier keyed {level} declares level {tier.level}")
            if not (0 < level <= 100):
                raise ValueError(f"Protection level must be in (0, 100], got {level}")
            if not (0 <= tier.fee_rate_percent < 100):
                raise ValueError(f"Fee rate for level {level} must be in [0, 100)")
        self._tiers = dict(sorted(tiers.items()))

    @property
    def levels(self) -> list[int]:
        return list(self._tiers)

    def __contains__(self, level: object) -> bool:
        return level in self._tiers

    def __iter__(self) -> Iterator[ProtectionTier]:
        return iter(self._tiers.values())

    def __len__(self) -> int:
        return len(self._tiers)

    def tier(self, level: int) -> ProtectionTier:
        try:
            return self._tiers[level]
        except KeyError:
            raise InvalidProtectionLevelError(level, self.levels) from None

    def fee_rate(self, level: int) -> Decimal:
        return self.tier(level).fee_rate_percent


def fee_schedule_from_settings(cfg: Settings = settings) -> FeeSchedule:
    return FeeSchedule(
        {
            level: ProtectionTier(
                level=level,
                fee_rate_percent=tier.fee_rate_percent,
                label=tier.label,
            )
            for level, tier in cfg.SHIELD_FEE_SCHEDULE.items()
        }
    )


def token_discounts_from_settings(cfg: Settings = settings) -> dict[TokenVersion, int]:
    return {TokenVersion(k): v for k, v in cfg.SHIELD_TOKEN_DISCOUNTS.items()}


DEFAULT_FEE_SCHEDULE = fee_schedule_from_settings()
DEFAULT_TOKEN_DISCOUNTS = token_discounts_from_settings()


def shield_tier(level: int) -> str:
    """Badge colour for a protection level: bronze / silver / gold."""
    if level >= 30:
        return "gold"
    if level >= 20:
        return "silver"
    return "bronze"
