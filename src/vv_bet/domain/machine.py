"""BetSubmission — drives one bet attempt through the transition function.

One instance == one transaction attempt. The instance makes exactly one
submit call to the chain collaborator and never polls: receipts are pushed in
by the host through on_receipt(). A terminal instance is never reused.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from src.vv_bet.domain.chain import ChainReceipt, ChainSubmitterProtocol, PendingHandle
from src.vv_bet.domain.states import (
    TERMINAL_STATES,
    AwaitingConfirmation,
    BetEvent,
    BetRequest,
    BetState,
    CancelRequested,
    Confirmed,
    Failed,
    Idle,
    ReceiptReceived,
    SubmissionAccepted,
    SubmissionRejected,
    SubmitRequested,
    ValidationFailed,
    ValidationPassed,
    transition,
)
from src.vv_bet.domain.validation import validate_bet
from src.vv_common.datetime_utils import utc_now
from src.vv_common.enums import BetStatus, FailureReason, TokenVersion
from src.vv_common.errors import AppError
from src.vv_common.id_generator import new_attempt_id, new_position_id
from src.vv_market.domain.models import Position
from src.vv_market.domain.repository import MarketReaderProtocol
from src.vv_shield.domain.schedule import (
    DEFAULT_FEE_SCHEDULE,
    DEFAULT_TOKEN_DISCOUNTS,
    FeeSchedule,
)

logger = logging.getLogger(__name__)


class BetSubmission:
    def __init__(
        self,
        markets: MarketReaderProtocol,
        chain: ChainSubmitterProtocol,
        schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
        token_discounts: Mapping[TokenVersion, int] = DEFAULT_TOKEN_DISCOUNTS,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_position_id,
        attempt_id: str | None = None,
    ) -> None:
        self._markets = markets
        self._chain = chain
        self._schedule = schedule
        self._token_discounts = token_discounts
        self._clock = clock
        self._id_factory = id_factory
        self.attempt_id = attempt_id or new_attempt_id()
        self._state: BetState = Idle()
        # accepted by the chain after the attempt was cancelled
        self._late_handle: PendingHandle | None = None

    # -- read side ---------------------------------------------------------

    @property
    def state(self) -> BetState:
        return self._state

    @property
    def status(self) -> BetStatus:
        return self._state.status

    @property
    def is_terminal(self) -> bool:
        return isinstance(self._state, TERMINAL_STATES)

    @property
    def handle(self) -> PendingHandle | None:
        """The chain handle, including one accepted after a cancel (for reconciliation)."""
        if isinstance(self._state, (AwaitingConfirmation, Confirmed, Failed)):
            return self._state.handle or self._late_handle
        return None

    @property
    def position(self) -> Position | None:
        return self._state.position if isinstance(self._state, Confirmed) else None

    @property
    def failure_reason(self) -> FailureReason | None:
        return self._state.reason if isinstance(self._state, Failed) else None

    # -- transitions -------------------------------------------------------

    def _dispatch(self, event: BetEvent) -> BetState:
        before = self._state
        self._state = transition(before, event)
        if self._state is not before:
            logger.debug(
                "Bet %s: %s -> %s on %s",
                self.attempt_id, before.status.value, self._state.status.value,
                type(event).__name__,
            )
            if isinstance(self._state, Failed):
                logger.info(
                    "Bet %s failed: reason=%s detail=%s",
                    self.attempt_id, self._state.reason.value, self._state.detail,
                )
        return self._state

    async def submit(self, request: BetRequest) -> BetState:
        """Validate and hand the bet to the chain collaborator.

        Raises AlreadyInProgressError (before any await) unless the machine is
        Idle. Validation and collaboration failures end in a Failed state.
        """
        self._dispatch(SubmitRequested(request))

        market = await self._markets.get_market(request.market_id)
        if market is None:
            return self._dispatch(
                ValidationFailed(FailureReason.MARKET_NOT_FOUND, request.market_id)
            )
        try:
            bet = validate_bet(
                request, market, self._schedule, self._clock(), self._token_discounts
            )
        except AppError as exc:
            return self._dispatch(ValidationFailed(exc.reason, exc.message))

        state = self._dispatch(ValidationPassed(bet))
        if isinstance(state, Failed):
            # cancelled while the market snapshot was loading
            return state

        try:
            outcome = await self._chain.submit(bet.to_chain_request())
        except Exception as exc:
            logger.exception("Bet %s: chain submitter raised", self.attempt_id)
            return self._dispatch(SubmissionRejected(f"chain submitter error: {exc}"))

        if isinstance(outcome, PendingHandle):
            if isinstance(self._state, Failed):
                # the transaction may still confirm; keep the handle for reconciliation
                self._late_handle = outcome
                logger.warning(
                    "Bet %s: handle %s accepted after cancellation",
                    self.attempt_id, outcome.tx_hash,
                )
                return self._state
            return self._dispatch(SubmissionAccepted(outcome))
        return self._dispatch(SubmissionRejected(outcome.detail))

    def on_receipt(self, receipt: ChainReceipt) -> BetState:
        """React to a confirmation status pushed by the host."""
        return self._dispatch(
            ReceiptReceived(receipt, position_id=self._id_factory(), received_at=self._clock())
        )

    def cancel(self) -> BetState:
        """Cancel before the chain accepts the submission; a no-op afterwards."""
        return self._dispatch(CancelRequested())
