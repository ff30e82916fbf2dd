"""Bet submission states, events and the single transition function.

    Idle -> Validating -> AwaitingSubmission -> AwaitingConfirmation -> Confirmed
                 \\               \\                       \\
                  +---------------+-----------------------+--> Failed(reason)

transition() is pure and total: every (state, event) pair either yields the
next state, leaves the state unchanged, or (submit outside Idle) raises
AlreadyInProgressError. Confirmed and Failed never change again.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from src.vv_bet.domain.chain import ChainReceipt, ChainSubmissionRequest, PendingHandle
from src.vv_common.enums import BetStatus, ChainStatus, FailureReason, TokenVersion
from src.vv_common.errors import AlreadyInProgressError
from src.vv_market.domain.models import Position
from src.vv_shield.domain.pricing import ShieldQuote

# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BetRequest:
    market_id: str
    user_id: str
    outcome: int  # index into market.outcomes
    stake: int
    shield_enabled: bool = False
    shield_level: int = 0
    token_version: TokenVersion | None = None


@dataclass(frozen=True)
class ValidatedBet:
    """A request that passed validation, with its resolved outcome id and quote."""

    request: BetRequest
    outcome_id: int
    quote: ShieldQuote | None  # None when shield is off

    @property
    def shield_level(self) -> int:
        return self.quote.level if self.quote else 0

    @property
    def total_value(self) -> Decimal:
        if self.quote is None:
            return Decimal(self.request.stake)
        return self.quote.total_cost

    def to_chain_request(self) -> ChainSubmissionRequest:
        return ChainSubmissionRequest(
            market_id=self.request.market_id,
            outcome=self.request.outcome,
            total_value=self.total_value,
            shield_enabled=self.quote is not None,
            shield_level=self.shield_level,
        )


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    status: ClassVar[BetStatus] = BetStatus.IDLE


@dataclass(frozen=True)
class Validating:
    request: BetRequest
    status: ClassVar[BetStatus] = BetStatus.VALIDATING


@dataclass(frozen=True)
class AwaitingSubmission:
    bet: ValidatedBet
    status: ClassVar[BetStatus] = BetStatus.AWAITING_SUBMISSION


@dataclass(frozen=True)
class AwaitingConfirmation:
    bet: ValidatedBet
    handle: PendingHandle
    status: ClassVar[BetStatus] = BetStatus.AWAITING_CONFIRMATION


@dataclass(frozen=True)
class Confirmed:
    bet: ValidatedBet
    handle: PendingHandle
    position: Position
    status: ClassVar[BetStatus] = BetStatus.CONFIRMED


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    detail: str = ""
    handle: PendingHandle | None = None
    status: ClassVar[BetStatus] = BetStatus.FAILED


BetState = Idle | Validating | AwaitingSubmission | AwaitingConfirmation | Confirmed | Failed

TERMINAL_STATES = (Confirmed, Failed)

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubmitRequested:
    request: BetRequest


@dataclass(frozen=True)
class ValidationPassed:
    bet: ValidatedBet


@dataclass(frozen=True)
class ValidationFailed:
    reason: FailureReason
    detail: str


@dataclass(frozen=True)
class SubmissionAccepted:
    handle: PendingHandle


@dataclass(frozen=True)
class SubmissionRejected:
    detail: str


@dataclass(frozen=True)
class ReceiptReceived:
    receipt: ChainReceipt
    position_id: str
    received_at: datetime


@dataclass(frozen=True)
class CancelRequested:
    pass


BetEvent = (
    SubmitRequested
    | ValidationPassed
    | ValidationFailed
    | SubmissionAccepted
    | SubmissionRejected
    | ReceiptReceived
    | CancelRequested
)

# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


def _build_position(bet: ValidatedBet, position_id: str, created_at: datetime) -> Position:
    req = bet.request
    return Position(
        id=position_id,
        market_id=req.market_id,
        user_id=req.user_id,
        outcome_id=bet.outcome_id,
        amount=req.stake,
        shield_enabled=bet.quote is not None,
        shield_percentage=bet.shield_level,
        created_at=created_at,
    )


def _on_receipt(state: AwaitingConfirmation, event: ReceiptReceived) -> BetState:
    receipt = event.receipt
    if receipt.status == ChainStatus.PENDING:
        return state
    if receipt.status == ChainStatus.FAILED:
        return Failed(
            FailureReason.CONFIRMATION_FAILED,
            receipt.detail or "transaction failed",
            state.handle,
        )
    expected = state.bet.total_value
    if receipt.committed_value != expected:
        return Failed(
            FailureReason.QUOTE_MISMATCH,
            f"committed {receipt.committed_value}, quoted {expected}",
            state.handle,
        )
    return Confirmed(
        bet=state.bet,
        handle=state.handle,
        position=_build_position(state.bet, event.position_id, event.received_at),
    )


def transition(state: BetState, event: BetEvent) -> BetState:
    if isinstance(event, SubmitRequested):
        if not isinstance(state, Idle):
            raise AlreadyInProgressError(state.status.value)
        return Validating(event.request)

    if isinstance(state, TERMINAL_STATES):
        return state

    if isinstance(event, CancelRequested):
        if isinstance(state, (Validating, AwaitingSubmission)):
            return Failed(FailureReason.USER_CANCELLED, "cancelled before submission")
        # Idle has nothing to cancel; AwaitingConfirmation is irreversible
        return state

    if isinstance(state, Validating):
        if isinstance(event, ValidationPassed):
            return AwaitingSubmission(event.bet)
        if isinstance(event, ValidationFailed):
            return Failed(event.reason, event.detail)
        return state

    if isinstance(state, AwaitingSubmission):
        if isinstance(event, SubmissionAccepted):
            return AwaitingConfirmation(state.bet, event.handle)
        if isinstance(event, SubmissionRejected):
            return Failed(FailureReason.SUBMISSION_REJECTED, event.detail)
        return state

    if isinstance(state, AwaitingConfirmation) and isinstance(event, ReceiptReceived):
        return _on_receipt(state, event)

    return state
