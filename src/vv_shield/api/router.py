"""vv_shield REST endpoints.

GET  /shield/schedule   — protection levels, fee rates and labels
POST /shield/quote      — protected amount and fee for a stake
POST /shield/analysis   — expected value / break-even for a shielded stake
"""

from fastapi import APIRouter, Request

from src.vv_common.response import ApiResponse, success_response
from src.vv_shield.application.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    FeeScheduleResponse,
    QuoteRequest,
    QuoteResponse,
)
from src.vv_shield.domain.analysis import analyze_protection
from src.vv_shield.domain.pricing import quote_protection
from src.vv_shield.domain.schedule import DEFAULT_FEE_SCHEDULE

router = APIRouter(prefix="/shield", tags=["shield"])


@router.get("/schedule")
async def get_schedule(request: Request) -> ApiResponse:
    result = FeeScheduleResponse.from_domain(DEFAULT_FEE_SCHEDULE)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/quote")
async def post_quote(body: QuoteRequest, request: Request) -> ApiResponse:
    quote = quote_protection(body.stake, body.level, token_version=body.token_version)
    resp = success_response(QuoteResponse.from_domain(quote).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/analysis")
async def post_analysis(body: AnalysisRequest, request: Request) -> ApiResponse:
    analysis = analyze_protection(body.stake, body.level, body.market_odds)
    resp = success_response(AnalysisResponse.from_domain(analysis).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
