"""MarketApplicationService — thin composition layer over the pure transitions.

The caller (router) passes the db session; writes commit here so that a
resolution and its pnl attachment land together. A failed write rolls the
whole transaction back before the error propagates.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.vv_common.datetime_utils import utc_now
from src.vv_common.enums import MarketStatus
from src.vv_common.errors import MarketNotFoundError
from src.vv_market.application.schemas import (
    MarketDetail,
    MarketListItem,
    MarketListResponse,
    MarketOddsResponse,
    MarketStatsResponse,
    PositionOut,
    ResolveMarketResponse,
    cursor_decode,
    cursor_encode,
)
from src.vv_market.domain.models import Market, Position
from src.vv_market.domain.odds import compute_market_stats, market_odds, summarize_market
from src.vv_market.domain.repository import MarketRepositoryProtocol
from src.vv_market.domain.transitions import apply_position, resolve_market, settle_positions
from src.vv_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class SessionMarketReader:
    """Binds a repository to one session so it satisfies MarketReaderProtocol."""

    def __init__(self, repo: MarketRepositoryProtocol, db: AsyncSession) -> None:
        self._repo = repo
        self._db = db

    async def get_market(self, market_id: str) -> Market | None:
        return await self._repo.get_market_by_id(self._db, market_id)


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._clock = clock

    @property
    def repo(self) -> MarketRepositoryProtocol:
        return self._repo

    async def _load(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def list_markets(
        self,
        db: AsyncSession,
        status: MarketStatus,
        category: str | None,
        featured: bool | None,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        resolved = status == MarketStatus.RESOLVED
        # ACTIVE also hides markets whose end time has passed
        now = None if resolved else self._clock()

        # Fetch limit+1 to detect has_more without COUNT(*)
        markets = await self._repo.list_markets(
            db, resolved, now, category, featured, cursor_ts, cursor_id, limit + 1
        )
        has_more = len(markets) > limit
        page = markets[:limit]

        items = [MarketListItem.from_domain(m, market_odds(m)) for m in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return MarketListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        market = await self._load(db, market_id)
        return MarketDetail.from_domain(market, summarize_market(market, self._clock()))

    async def get_odds(self, db: AsyncSession, market_id: str) -> MarketOddsResponse:
        market = await self._load(db, market_id)
        return MarketOddsResponse(
            market_id=market.id,
            total_liquidity=market.total_liquidity,
            odds=market_odds(market),
        )

    async def get_stats(self, db: AsyncSession, market_id: str) -> MarketStatsResponse:
        market = await self._load(db, market_id)
        positions = await self._repo.list_positions(db, market_id)
        return MarketStatsResponse.from_domain(compute_market_stats(market, positions))

    async def record_position(self, db: AsyncSession, position: Position) -> Market:
        """Apply a confirmed position under the market row lock and persist it.

        Returns the market as it stands after the position.
        """
        try:
            market = await self._repo.get_market_for_update(db, position.market_id)
            if market is None:
                raise MarketNotFoundError(position.market_id)
            updated = apply_position(market, position)
            await self._repo.save_position(db, position)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Recorded position %s on market %s: volume %d -> %d",
            position.id, market.id, market.total_volume, updated.total_volume,
        )
        return updated

    async def resolve(
        self, db: AsyncSession, market_id: str, winning_outcome: int
    ) -> ResolveMarketResponse:
        try:
            market = await self._repo.get_market_for_update(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            resolved = resolve_market(market, winning_outcome)
            positions = await self._repo.list_positions(db, market_id)
            settled = settle_positions(resolved, positions)
            await self._repo.save_resolution(db, resolved)
            await self._repo.save_pnl(db, settled)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ResolveMarketResponse(
            market_id=market_id,
            winning_outcome=winning_outcome,
            positions=[PositionOut.from_domain(p) for p in settled],
        )
