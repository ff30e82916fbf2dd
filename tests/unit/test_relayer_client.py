"""Unit tests for RelayerChainSubmitter against an httpx.MockTransport."""

import json
from decimal import Decimal

import httpx
import pytest

from src.vv_bet.domain.chain import ChainSubmissionRequest, PendingHandle, SubmissionRejection
from src.vv_bet.infrastructure.relayer_client import RelayerChainSubmitter
from src.vv_common.enums import ChainStatus

REQUEST = ChainSubmissionRequest(
    market_id="MKT-1",
    outcome=1,
    total_value=Decimal("106.5"),
    shield_enabled=True,
    shield_level=30,
)


def _submitter(handler) -> RelayerChainSubmitter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://relayer")
    return RelayerChainSubmitter(client=client)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_pending_handle(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "pending", "tx_hash": "0xabc"})

        result = await _submitter(handler).submit(REQUEST)

        assert result == PendingHandle("0xabc")
        assert seen["path"] == "/transactions"
        assert seen["body"]["value"] == "106.5"
        assert seen["body"]["shield_level"] == 30

    @pytest.mark.asyncio
    async def test_rejected_with_reason(self):
        def handler(request):
            return httpx.Response(200, json={"status": "rejected", "reason": "user declined signing"})

        result = await _submitter(handler).submit(REQUEST)

        assert result == SubmissionRejection("user declined signing")

    @pytest.mark.asyncio
    async def test_http_error_is_rejection(self):
        def handler(request):
            return httpx.Response(503)

        result = await _submitter(handler).submit(REQUEST)

        assert isinstance(result, SubmissionRejection)
        assert result.detail.startswith("relayer unavailable")

    @pytest.mark.asyncio
    async def test_pending_without_hash_is_rejection(self):
        def handler(request):
            return httpx.Response(200, json={"status": "pending"})

        result = await _submitter(handler).submit(REQUEST)

        assert result == SubmissionRejection("rejected by relayer")


class TestObserve:
    @pytest.mark.asyncio
    async def test_confirmed_with_value(self):
        def handler(request):
            assert request.url.path == "/transactions/0xabc"
            return httpx.Response(200, json={"status": "confirmed", "committed_value": "106.5"})

        receipt = await _submitter(handler).observe(PendingHandle("0xabc"))

        assert receipt.status == ChainStatus.CONFIRMED
        assert receipt.committed_value == Decimal("106.5")

    @pytest.mark.asyncio
    async def test_timeout_maps_to_failed(self):
        def handler(request):
            return httpx.Response(200, json={"status": "timeout", "reason": "dropped"})

        receipt = await _submitter(handler).observe(PendingHandle("0xabc"))

        assert receipt.status == ChainStatus.FAILED
        assert receipt.detail == "dropped"

    @pytest.mark.asyncio
    async def test_unreachable_relayer_stays_pending(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        receipt = await _submitter(handler).observe(PendingHandle("0xabc"))

        assert receipt.status == ChainStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_status_stays_pending(self):
        def handler(request):
            return httpx.Response(200, json={"status": "reorged"})

        receipt = await _submitter(handler).observe(PendingHandle("0xabc"))

        assert receipt.status == ChainStatus.PENDING

    @pytest.mark.asyncio
    async def test_bad_value_is_none(self):
        def handler(request):
            return httpx.Response(200, json={"status": "confirmed", "committed_value": "lots"})

        receipt = await _submitter(handler).observe(PendingHandle("0xabc"))

        assert receipt.committed_value is None
