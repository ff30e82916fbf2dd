"""Unified error codes and custom exceptions.

Every error carries a stable FailureReason so callers can map it to
user-facing copy without matching on the message text.

Error code ranges:
  3xxx: Market
  4xxx: Bet
  5xxx: Shield
  9xxx: System
"""

from src.vv_common.enums import FailureReason


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        reason: FailureReason = FailureReason.INTERNAL,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.reason = reason
        super().__init__(message)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3001, f"Market not found: {market_id}", 404, FailureReason.MARKET_NOT_FOUND
        )


class MarketClosedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3002, f"Market is closed for betting: {market_id}", 422, FailureReason.MARKET_CLOSED
        )


class InvalidOutcomeError(AppError):
    def __init__(self, outcome: int, outcome_count: int) -> None:
        super().__init__(
            3003,
            f"Outcome index {outcome} out of range for {outcome_count} outcomes",
            422,
            FailureReason.INVALID_OUTCOME,
        )


class UnknownOutcomeError(AppError):
    def __init__(self, market_id: str, outcome_id: int) -> None:
        super().__init__(
            3004,
            f"Outcome {outcome_id} does not exist on market {market_id}",
            422,
            FailureReason.UNKNOWN_OUTCOME,
        )


class MarketAlreadyResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3005,
            f"Cannot apply position to resolved market {market_id}",
            409,
            FailureReason.MARKET_ALREADY_RESOLVED,
        )


class AlreadyResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3006, f"Market already resolved: {market_id}", 409, FailureReason.ALREADY_RESOLVED
        )


class MarketNotResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3007, f"Market not resolved yet: {market_id}", 409, FailureReason.MARKET_NOT_RESOLVED
        )


# --- 4xxx: Bet ---

class InvalidStakeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid stake: {detail}", 422, FailureReason.INVALID_STAKE)


class AlreadyInProgressError(AppError):
    def __init__(self, status: str) -> None:
        super().__init__(
            4002,
            f"Bet submission already in progress (status {status})",
            409,
            FailureReason.ALREADY_IN_PROGRESS,
        )


class BetNotFoundError(AppError):
    def __init__(self, attempt_id: str) -> None:
        super().__init__(
            4003, f"Bet attempt not found: {attempt_id}", 404, FailureReason.BET_NOT_FOUND
        )


# --- 5xxx: Shield ---

class InvalidProtectionLevelError(AppError):
    def __init__(self, level: int, allowed: list[int]) -> None:
        super().__init__(
            5001,
            f"Protection level {level} not offered; allowed levels: {allowed}",
            422,
            FailureReason.INVALID_PROTECTION_LEVEL,
        )


class InvalidOddsError(AppError):
    def __init__(self, odds: object) -> None:
        super().__init__(
            5002, f"Market odds must be in (0, 100], got {odds}", 422, FailureReason.INVALID_ODDS
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500, FailureReason.INTERNAL)
