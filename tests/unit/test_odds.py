from datetime import UTC, datetime, timedelta

import pytest

from src.vv_market.domain.models import Market, Outcome, Position
from src.vv_market.domain.odds import (
    compute_market_stats,
    compute_odds,
    market_odds,
    summarize_market,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _market(*liquidities: int, **kwargs) -> Market:
    outcomes = tuple(Outcome(i, f"O{i}", liq) for i, liq in enumerate(liquidities))
    defaults = dict(
        id="MKT-ODDS",
        question="Q?",
        outcomes=outcomes,
        end_time=NOW + timedelta(days=2, hours=3),
        total_volume=sum(liquidities),
    )
    defaults.update(kwargs)
    return Market(**defaults)


class TestComputeOdds:
    def test_share_of_liquidity(self) -> None:
        m = _market(300, 100)
        assert compute_odds(m.outcomes[0], m) == pytest.approx(75.0)
        assert compute_odds(m.outcomes[1], m) == pytest.approx(25.0)

    @pytest.mark.parametrize("count", [2, 3, 5])
    def test_zero_liquidity_is_zero_for_every_outcome(self, count: int) -> None:
        m = _market(*([0] * count))
        assert all(compute_odds(o, m) == 0 for o in m.outcomes)

    def test_bounds(self) -> None:
        m = _market(0, 500)
        assert compute_odds(m.outcomes[0], m) == 0
        assert compute_odds(m.outcomes[1], m) == 100

    def test_market_odds_keyed_by_outcome_id(self) -> None:
        m = _market(1, 1, 2)
        odds = market_odds(m)
        assert odds == pytest.approx({0: 25.0, 1: 25.0, 2: 50.0})


class TestSummarizeMarket:
    def test_display_fields(self) -> None:
        m = _market(1500, 500)
        s = summarize_market(m, NOW)
        assert s.volume_display == "2K"
        assert s.time_remaining == "2d 3h"
        assert [o.odds_display for o in s.outcomes] == ["75.0%", "25.0%"]
        assert s.outcomes[0].liquidity_display == "$1,500.00"

    def test_ended_market(self) -> None:
        m = _market(1, 1)
        s = summarize_market(m, NOW + timedelta(days=5))
        assert s.time_remaining == "Ended"

    def test_resolved_market(self) -> None:
        m = _market(1, 1, resolved=True, winning_outcome=0)
        assert summarize_market(m, NOW).time_remaining == "Resolved"


class TestMarketStats:
    def _pos(self, pid: str, user: str, outcome_id: int, amount: int) -> Position:
        return Position(pid, "MKT-ODDS", user, outcome_id, amount)

    def test_aggregates(self) -> None:
        m = _market(300, 100, 0)
        positions = [
            self._pos("a", "u1", 0, 200),
            self._pos("b", "u2", 0, 100),
            self._pos("c", "u1", 1, 100),
        ]

        s = compute_market_stats(m, positions)

        assert s.total_volume == 400
        assert s.position_count == 3
        assert s.unique_participants == 2
        assert s.average_bet == 133
        assert s.liquidity_by_outcome == {0: 300, 1: 100, 2: 0}
        assert s.odds == pytest.approx({0: 75.0, 1: 25.0, 2: 0.0})

    def test_no_positions(self) -> None:
        s = compute_market_stats(_market(0, 0), [])
        assert s.position_count == 0
        assert s.average_bet == 0
        assert s.liquidity_by_outcome == {0: 0, 1: 0}
