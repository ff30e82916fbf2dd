"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.vv_bet.api.router import get_bet_service
from src.vv_bet.api.router import router as bet_router
from src.vv_bet.infrastructure.relayer_client import RelayerChainSubmitter
from src.vv_common.database import engine
from src.vv_common.errors import AppError
from src.vv_common.response import error_response
from src.vv_gateway.middleware.request_log import RequestLogMiddleware
from src.vv_market.api.router import router as market_router
from src.vv_shield.api.router import router as shield_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the store and bind the relayer. Shutdown: close both."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    relayer = RelayerChainSubmitter()
    get_bet_service().bind_chain(relayer)
    yield
    await relayer.aclose()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.reason.value)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(shield_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(bet_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
