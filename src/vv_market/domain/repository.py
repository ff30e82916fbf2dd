"""Repository Protocols — dependency inversion for testability.

MarketReaderProtocol is the read capability the bet state machine consumes;
MarketRepositoryProtocol is the session-bound store behind it.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.vv_market.domain.models import Market, Position


class MarketReaderProtocol(Protocol):
    async def get_market(self, market_id: str) -> Market | None: ...


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

    async def get_market_for_update(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

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
    ) -> list[Market]: ...

    async def save_position(self, db: AsyncSession, position: Position) -> None: ...

    async def save_resolution(self, db: AsyncSession, market: Market) -> None: ...

    async def list_positions(self, db: AsyncSession, market_id: str) -> list[Position]: ...

    async def save_pnl(self, db: AsyncSession, positions: list[Position]) -> None: ...
