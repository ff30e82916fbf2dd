"""vv_bet REST endpoints.

POST /bets                           — validate + submit one bet attempt
GET  /bets/{attempt_id}              — current state of an attempt
POST /bets/{attempt_id}/cancel       — cancel before the chain accepts it
POST /bets/{attempt_id}/receipt      — host pushes a chain confirmation status
POST /bets/{attempt_id}/refresh      — host asks the relayer once for the status
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vv_bet.application.schemas import PlaceBetRequest, ReceiptRequest
from src.vv_bet.application.service import BetApplicationService
from src.vv_common.database import get_db_session
from src.vv_common.response import ApiResponse, success_response

router = APIRouter(prefix="/bets", tags=["bets"])

_service = BetApplicationService()


def get_bet_service() -> BetApplicationService:
    return _service


@router.post("")
async def place_bet(
    body: PlaceBetRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BetApplicationService, Depends(get_bet_service)],
) -> ApiResponse:
    result = await service.place_bet(body, db)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{attempt_id}")
async def get_bet(
    attempt_id: str,
    request: Request,
    service: Annotated[BetApplicationService, Depends(get_bet_service)],
) -> ApiResponse:
    result = service.get_bet(attempt_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{attempt_id}/cancel")
async def cancel_bet(
    attempt_id: str,
    request: Request,
    service: Annotated[BetApplicationService, Depends(get_bet_service)],
) -> ApiResponse:
    result = service.cancel(attempt_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{attempt_id}/receipt")
async def push_receipt(
    attempt_id: str,
    body: ReceiptRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BetApplicationService, Depends(get_bet_service)],
) -> ApiResponse:
    result = await service.record_receipt(attempt_id, body.to_domain(), db)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{attempt_id}/refresh")
async def refresh_bet(
    attempt_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BetApplicationService, Depends(get_bet_service)],
) -> ApiResponse:
    result = await service.refresh(attempt_id, db)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
