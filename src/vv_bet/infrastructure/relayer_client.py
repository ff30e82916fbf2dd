"""RelayerChainSubmitter — ChainSubmitterProtocol over an HTTP transaction relayer.

Relayer contract:
    POST /transactions
        body  {"market_id", "outcome", "value", "shield_enabled", "shield_level"}
        200   {"status": "pending", "tx_hash": "0x..."}
        200   {"status": "rejected", "reason": "..."}
    GET  /transactions/{tx_hash}
        200   {"status": "pending" | "confirmed" | "failed",
               "committed_value": "104.0", "reason": "..."}

Amounts travel as decimal strings so no float ever touches the value.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from config.settings import settings
from src.vv_bet.domain.chain import (
    ChainReceipt,
    ChainSubmissionRequest,
    PendingHandle,
    SubmissionRejection,
)
from src.vv_common.enums import ChainStatus

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    "pending": ChainStatus.PENDING,
    "confirmed": ChainStatus.CONFIRMED,
    "failed": ChainStatus.FAILED,
    "timeout": ChainStatus.FAILED,
}


def _parse_value(raw: Any) -> Decimal | None:
    if raw is None:
        return None
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        logger.warning("Relayer returned unparseable committed_value %r", raw)
        return None


class RelayerChainSubmitter:
    def __init__(
        self,
        base_url: str = settings.CHAIN_RELAYER_URL,
        timeout: float = settings.CHAIN_RELAYER_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(
        self, request: ChainSubmissionRequest
    ) -> PendingHandle | SubmissionRejection:
        payload = {
            "market_id": request.market_id,
            "outcome": request.outcome,
            "value": str(request.total_value),
            "shield_enabled": request.shield_enabled,
            "shield_level": request.shield_level,
        }
        try:
            resp = await self._client.post("/transactions", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Relayer submit failed for market %s: %s", request.market_id, exc)
            return SubmissionRejection(f"relayer unavailable: {exc}")

        if body.get("status") == "pending" and body.get("tx_hash"):
            logger.info("Relayer accepted bet on %s: tx=%s", request.market_id, body["tx_hash"])
            return PendingHandle(tx_hash=body["tx_hash"])
        return SubmissionRejection(body.get("reason") or "rejected by relayer")

    async def observe(self, handle: PendingHandle) -> ChainReceipt:
        try:
            resp = await self._client.get(f"/transactions/{handle.tx_hash}")
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            # unknown is not failed: the host may ask again
            logger.warning("Relayer observe failed for %s: %s", handle.tx_hash, exc)
            return ChainReceipt(status=ChainStatus.PENDING, detail=str(exc))

        status = _STATUS_MAP.get(str(body.get("status", "")).lower())
        if status is None:
            logger.warning("Relayer returned unknown status %r for %s", body.get("status"), handle.tx_hash)
            return ChainReceipt(status=ChainStatus.PENDING, detail="unknown relayer status")
        return ChainReceipt(
            status=status,
            committed_value=_parse_value(body.get("committed_value")),
            detail=body.get("reason"),
        )
