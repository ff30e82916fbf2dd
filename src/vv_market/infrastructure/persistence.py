"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL against the existing store (no ORM, no DDL).

Position writes go through get_market_for_update (row lock on the market) and
store aggregates as increments, so concurrent confirmations on one market
serialize and never overwrite each other's liquidity or volume. A guarded
UPDATE that matches 0 rows means the market was resolved underneath us.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.vv_common.errors import MarketAlreadyResolvedError, UnknownOutcomeError
from src.vv_market.domain.models import Market, Outcome, Position

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question, description, category, end_time,
    total_volume, resolved, winning_outcome,
    min_bet, max_bet, shield_available, featured, created_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_GET_OUTCOMES_SQL = text("""
    SELECT market_id, outcome_id, name, liquidity
    FROM market_outcomes
    WHERE market_id = :market_id
    ORDER BY display_order ASC
""")

_GET_OUTCOMES_FOR_MARKETS_SQL = text("""
    SELECT market_id, outcome_id, name, liquidity
    FROM market_outcomes
    WHERE market_id = ANY(:market_ids)
    ORDER BY market_id, display_order ASC
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        resolved = :resolved
        AND (CAST(:now AS TIMESTAMPTZ) IS NULL OR end_time > CAST(:now AS TIMESTAMPTZ))
        AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
        AND (CAST(:featured AS BOOLEAN) IS NULL OR featured = CAST(:featured AS BOOLEAN))
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_ADD_MARKET_VOLUME_SQL = text("""
    UPDATE markets
    SET total_volume = total_volume + :amount
    WHERE id = :market_id AND resolved = FALSE
""")

_ADD_OUTCOME_LIQUIDITY_SQL = text("""
    UPDATE market_outcomes
    SET liquidity = liquidity + :amount
    WHERE market_id = :market_id AND outcome_id = :outcome_id
""")

_INSERT_POSITION_SQL = text("""
    INSERT INTO positions
        (id, market_id, user_id, outcome_id, amount,
         shield_enabled, shield_percentage, created_at)
    VALUES
        (:id, :market_id, :user_id, :outcome_id, :amount,
         :shield_enabled, :shield_percentage, :created_at)
""")

_RESOLVE_MARKET_SQL = text("""
    UPDATE markets
    SET resolved = TRUE, winning_outcome = :winning_outcome
    WHERE id = :market_id AND resolved = FALSE
""")

_LIST_POSITIONS_SQL = text("""
    SELECT id, market_id, user_id, outcome_id, amount,
           shield_enabled, shield_percentage, created_at, pnl
    FROM positions
    WHERE market_id = :market_id
    ORDER BY created_at ASC, id ASC
""")

_SET_PNL_SQL = text("""
    UPDATE positions
    SET pnl = :pnl
    WHERE id = :id AND pnl IS NULL
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _rows_to_market(row: object, outcome_rows: list[object]) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        question=row.question,  # type: ignore[attr-defined]
        outcomes=tuple(
            Outcome(id=o.outcome_id, name=o.name, liquidity=o.liquidity)  # type: ignore[attr-defined]
            for o in outcome_rows
        ),
        end_time=row.end_time,  # type: ignore[attr-defined]
        total_volume=row.total_volume,  # type: ignore[attr-defined]
        resolved=row.resolved,  # type: ignore[attr-defined]
        winning_outcome=row.winning_outcome,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        min_bet=row.min_bet,  # type: ignore[attr-defined]
        max_bet=row.max_bet,  # type: ignore[attr-defined]
        shield_available=row.shield_available,  # type: ignore[attr-defined]
        featured=row.featured,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_position(row: object) -> Position:
    return Position(
        id=row.id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        outcome_id=row.outcome_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        shield_enabled=row.shield_enabled,  # type: ignore[attr-defined]
        shield_percentage=row.shield_percentage,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        pnl=row.pnl,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    async def _load(self, db: AsyncSession, sql, market_id: str) -> Market | None:  # noqa: ANN001
        row = (await db.execute(sql, {"market_id": market_id})).fetchone()
        if row is None:
            return None
        outcome_rows = (
            await db.execute(_GET_OUTCOMES_SQL, {"market_id": market_id})
        ).fetchall()
        return _rows_to_market(row, list(outcome_rows))

    async def get_market_by_id(self, db: AsyncSession, market_id: str) -> Market | None:
        return await self._load(db, _GET_MARKET_SQL, market_id)

    async def get_market_for_update(self, db: AsyncSession, market_id: str) -> Market | None:
        """Same as get_market_by_id, holding the market row lock until commit/rollback."""
        return await self._load(db, _GET_MARKET_FOR_UPDATE_SQL, market_id)

    async def list_markets(
        self,
        db: AsyncSession,
        resolved: bool,
        now: datetime | None,
        category: str | None,
        featured: bool | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        rows = (
            await db.execute(
                _LIST_MARKETS_SQL,
                {
                    "resolved": resolved,
                    "now": now,
                    "category": category,
                    "featured": featured,
                    "cursor_ts": cursor_ts_dt,
                    "cursor_id": cursor_id,
                    "limit": limit,
                },
            )
        ).fetchall()
        if not rows:
            return []

        outcome_rows = (
            await db.execute(
                _GET_OUTCOMES_FOR_MARKETS_SQL,
                {"market_ids": [r.id for r in rows]},  # type: ignore[attr-defined]
            )
        ).fetchall()
        by_market: dict[str, list[object]] = {}
        for o in outcome_rows:
            by_market.setdefault(o.market_id, []).append(o)  # type: ignore[attr-defined]
        return [
            _rows_to_market(r, by_market.get(r.id, []))  # type: ignore[attr-defined]
            for r in rows
        ]

    async def save_position(self, db: AsyncSession, position: Position) -> None:
        """Insert the position and add its amount to outcome liquidity and market volume.

        Raises:
            MarketAlreadyResolvedError: the market resolved before this write.
            UnknownOutcomeError: the outcome row does not exist.
        """
        volume = await db.execute(
            _ADD_MARKET_VOLUME_SQL,
            {"market_id": position.market_id, "amount": position.amount},
        )
        if volume.rowcount == 0:
            raise MarketAlreadyResolvedError(position.market_id)

        liquidity = await db.execute(
            _ADD_OUTCOME_LIQUIDITY_SQL,
            {
                "market_id": position.market_id,
                "outcome_id": position.outcome_id,
                "amount": position.amount,
            },
        )
        if liquidity.rowcount == 0:
            raise UnknownOutcomeError(position.market_id, position.outcome_id)

        await db.execute(
            _INSERT_POSITION_SQL,
            {
                "id": position.id,
                "market_id": position.market_id,
                "user_id": position.user_id,
                "outcome_id": position.outcome_id,
                "amount": position.amount,
                "shield_enabled": position.shield_enabled,
                "shield_percentage": position.shield_percentage,
                "created_at": position.created_at,
            },
        )

    async def save_resolution(self, db: AsyncSession, market: Market) -> None:
        await db.execute(
            _RESOLVE_MARKET_SQL,
            {"market_id": market.id, "winning_outcome": market.winning_outcome},
        )

    async def list_positions(self, db: AsyncSession, market_id: str) -> list[Position]:
        rows = (await db.execute(_LIST_POSITIONS_SQL, {"market_id": market_id})).fetchall()
        return [_row_to_position(r) for r in rows]

    async def save_pnl(self, db: AsyncSession, positions: list[Position]) -> None:
        for p in positions:
            if p.pnl is None:
                continue
            await db.execute(_SET_PNL_SQL, {"id": p.id, "pnl": p.pnl})
