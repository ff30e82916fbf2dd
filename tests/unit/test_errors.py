"""Tests for vv_common.errors and vv_common.response."""

from src.vv_common.enums import FailureReason
from src.vv_common.errors import (
    AlreadyInProgressError,
    AppError,
    BetNotFoundError,
    InvalidOutcomeError,
    InvalidProtectionLevelError,
    InvalidStakeError,
    MarketClosedError,
    MarketNotFoundError,
)
from src.vv_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.reason == FailureReason.INTERNAL

    def test_custom_http_status(self) -> None:
        err = AppError(code=4001, message="bad", http_status=422)
        assert err.http_status == 422

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="test"), Exception)


class TestSpecificErrors:
    def test_invalid_stake(self) -> None:
        err = InvalidStakeError("stake must be positive, got 0")
        assert err.code == 4001
        assert err.http_status == 422
        assert err.reason == FailureReason.INVALID_STAKE
        assert "got 0" in err.message

    def test_invalid_outcome(self) -> None:
        err = InvalidOutcomeError(3, 2)
        assert err.code == 3003
        assert err.reason == FailureReason.INVALID_OUTCOME
        assert "3" in err.message

    def test_invalid_protection_level_lists_allowed(self) -> None:
        err = InvalidProtectionLevelError(15, [10, 20, 30])
        assert err.code == 5001
        assert err.reason == FailureReason.INVALID_PROTECTION_LEVEL
        assert "[10, 20, 30]" in err.message

    def test_market_not_found(self) -> None:
        err = MarketNotFoundError("MKT-123")
        assert err.code == 3001
        assert err.http_status == 404

    def test_market_closed(self) -> None:
        err = MarketClosedError("MKT-123")
        assert err.code == 3002
        assert err.reason == FailureReason.MARKET_CLOSED

    def test_already_in_progress(self) -> None:
        err = AlreadyInProgressError("VALIDATING")
        assert err.code == 4002
        assert err.http_status == 409
        assert "VALIDATING" in err.message

    def test_bet_not_found(self) -> None:
        err = BetNotFoundError("bet-abc")
        assert err.code == 4003
        assert err.http_status == 404


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.reason is None
        assert resp.data == {"id": "abc"}

    def test_error(self) -> None:
        resp = error_response(4001, "Invalid stake", "INVALID_STAKE")
        assert resp.code == 4001
        assert resp.reason == "INVALID_STAKE"
        assert resp.data is None

    def test_serialization(self) -> None:
        d = success_response({"stake": 100}).model_dump()
        for key in ("code", "message", "reason", "data", "timestamp", "request_id"):
            assert key in d

    def test_request_id_prefix(self) -> None:
        assert ApiResponse().request_id.startswith("req_")
