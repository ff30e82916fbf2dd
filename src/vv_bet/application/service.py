"""BetApplicationService — owns live bet attempts and wires them to the stores.

Attempts are transient: they live in an in-memory registry keyed by attempt
id and are never persisted. Only a Confirmed attempt writes anything, through
MarketApplicationService.record_position.

Recording is tracked apart from the machine state: an attempt can be
Confirmed while its position is not yet stored (the write failed). Every later
receipt push or refresh of that attempt retries the write until it lands.

Finished attempts (terminal, and recorded if Confirmed) stay readable for
``settings.BET_ATTEMPT_TTL_SECONDS`` and are then evicted; their
client_bet_id becomes free again.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.vv_bet.application.schemas import BetStatusResponse, PlaceBetRequest
from src.vv_bet.domain.chain import ChainReceipt, ChainSubmitterProtocol
from src.vv_bet.domain.machine import BetSubmission
from src.vv_bet.domain.states import AwaitingConfirmation, Confirmed
from src.vv_common.datetime_utils import utc_now
from src.vv_common.errors import BetNotFoundError, InternalError
from src.vv_common.id_generator import new_attempt_id
from src.vv_market.application.service import MarketApplicationService, SessionMarketReader
from src.vv_shield.domain.schedule import DEFAULT_FEE_SCHEDULE, FeeSchedule

logger = logging.getLogger(__name__)


class BetApplicationService:
    def __init__(
        self,
        chain: ChainSubmitterProtocol | None = None,
        markets: MarketApplicationService | None = None,
        schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
        clock: Callable[[], datetime] = utc_now,
        attempt_ttl: timedelta | None = None,
    ) -> None:
        self._chain = chain
        self._markets = markets or MarketApplicationService()
        self._schedule = schedule
        self._clock = clock
        self._attempt_ttl = (
            attempt_ttl
            if attempt_ttl is not None
            else timedelta(seconds=settings.BET_ATTEMPT_TTL_SECONDS)
        )
        self._attempts: dict[str, BetSubmission] = {}
        self._recorded: set[str] = set()
        self._finished_at: dict[str, datetime] = {}

    def bind_chain(self, chain: ChainSubmitterProtocol) -> None:
        self._chain = chain

    def _require_chain(self) -> ChainSubmitterProtocol:
        if self._chain is None:
            raise InternalError("No chain submitter bound")
        return self._chain

    def _get(self, attempt_id: str) -> BetSubmission:
        self._evict_expired()
        machine = self._attempts.get(attempt_id)
        if machine is None:
            raise BetNotFoundError(attempt_id)
        return machine

    # -- registry housekeeping --------------------------------------------

    def _mark_finished(self, machine: BetSubmission) -> None:
        attempt_id = machine.attempt_id
        if attempt_id in self._finished_at or not machine.is_terminal:
            return
        if isinstance(machine.state, Confirmed) and attempt_id not in self._recorded:
            return
        self._finished_at[attempt_id] = self._clock()

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [
            attempt_id
            for attempt_id, finished in self._finished_at.items()
            if now - finished >= self._attempt_ttl
        ]
        for attempt_id in expired:
            del self._finished_at[attempt_id]
            self._attempts.pop(attempt_id, None)
            self._recorded.discard(attempt_id)
        if expired:
            logger.debug("Evicted %d finished bet attempts", len(expired))

    async def _record_if_confirmed(self, db: AsyncSession, machine: BetSubmission) -> None:
        state = machine.state
        if not isinstance(state, Confirmed) or machine.attempt_id in self._recorded:
            return
        try:
            await self._markets.record_position(db, state.position)
        except Exception:
            logger.error(
                "Bet %s confirmed but position %s not recorded; will retry",
                machine.attempt_id, state.position.id,
            )
            raise
        self._recorded.add(machine.attempt_id)

    # -- operations --------------------------------------------------------

    async def place_bet(self, req: PlaceBetRequest, db: AsyncSession) -> BetStatusResponse:
        self._evict_expired()
        attempt_id = req.client_bet_id or new_attempt_id()
        machine = self._attempts.get(attempt_id)
        if machine is None:
            machine = BetSubmission(
                markets=SessionMarketReader(self._markets.repo, db),
                chain=self._require_chain(),
                schedule=self._schedule,
                clock=self._clock,
                attempt_id=attempt_id,
            )
            self._attempts[attempt_id] = machine
        # a reused id reaches a non-Idle machine and raises AlreadyInProgressError
        await machine.submit(req.to_domain())
        self._mark_finished(machine)
        return BetStatusResponse.from_machine(machine)

    def get_bet(self, attempt_id: str) -> BetStatusResponse:
        return BetStatusResponse.from_machine(self._get(attempt_id))

    def cancel(self, attempt_id: str) -> BetStatusResponse:
        machine = self._get(attempt_id)
        machine.cancel()
        self._mark_finished(machine)
        return BetStatusResponse.from_machine(machine)

    async def record_receipt(
        self, attempt_id: str, receipt: ChainReceipt, db: AsyncSession
    ) -> BetStatusResponse:
        machine = self._get(attempt_id)
        machine.on_receipt(receipt)
        await self._record_if_confirmed(db, machine)
        self._mark_finished(machine)
        return BetStatusResponse.from_machine(machine)

    async def refresh(self, attempt_id: str, db: AsyncSession) -> BetStatusResponse:
        """Ask the chain collaborator once for the status of the held handle.

        A Confirmed attempt whose position is not stored yet retries the write
        instead of asking the chain.
        """
        machine = self._get(attempt_id)
        if isinstance(machine.state, AwaitingConfirmation):
            receipt = await self._require_chain().observe(machine.state.handle)
            machine.on_receipt(receipt)
        await self._record_if_confirmed(db, machine)
        self._mark_finished(machine)
        return BetStatusResponse.from_machine(machine)
