"""vv_market REST endpoints.

GET  /markets                        — paginated listing (ACTIVE or RESOLVED)
GET  /markets/{market_id}            — detail with derived odds and display figures
GET  /markets/{market_id}/odds       — odds per outcome id
GET  /markets/{market_id}/stats      — position aggregates
POST /markets/{market_id}/resolve    — one-way resolution + pnl attachment
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vv_common.database import get_db_session
from src.vv_common.enums import MarketStatus
from src.vv_common.response import ApiResponse, success_response
from src.vv_market.application.schemas import ResolveMarketRequest
from src.vv_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


def get_market_service() -> MarketApplicationService:
    return _service


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    status: MarketStatus = Query(
        MarketStatus.ACTIVE, description="ACTIVE: open and not yet ended. RESOLVED: has a winner."
    ),
    category: str | None = Query(None),
    featured: bool | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await service.list_markets(db, status, category, featured, cursor, limit)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.get_market(db, market_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}/odds")
async def get_market_odds(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.get_odds(db, market_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}/stats")
async def get_market_stats(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.get_stats(db, market_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    body: ResolveMarketRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.resolve(db, market_id, body.winning_outcome)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
