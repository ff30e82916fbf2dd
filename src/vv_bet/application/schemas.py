from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.vv_bet.domain.chain import ChainReceipt
from src.vv_bet.domain.machine import BetSubmission
from src.vv_bet.domain.states import (
    AwaitingConfirmation,
    AwaitingSubmission,
    BetRequest,
    Confirmed,
    Failed,
    Validating,
)
from src.vv_common.enums import ChainStatus, TokenVersion
from src.vv_market.application.schemas import PositionOut


class PlaceBetRequest(BaseModel):
    market_id: str
    user_id: str
    outcome: int
    stake: int
    shield_enabled: bool = False
    shield_level: int = 0
    token_version: TokenVersion | None = None
    client_bet_id: str | None = Field(
        None, description="Reusing an id while its attempt is live is rejected"
    )

    @field_validator("client_bet_id")
    @classmethod
    def no_whitespace(cls, v: str | None) -> str | None:
        if v is not None and (not v or v != v.strip() or " " in v):
            raise ValueError("client_bet_id must not contain whitespace")
        return v

    def to_domain(self) -> BetRequest:
        return BetRequest(
            market_id=self.market_id,
            user_id=self.user_id,
            outcome=self.outcome,
            stake=self.stake,
            shield_enabled=self.shield_enabled,
            shield_level=self.shield_level if self.shield_enabled else 0,
            token_version=self.token_version,
        )


class ReceiptRequest(BaseModel):
    status: ChainStatus
    committed_value: Decimal | None = None
    detail: str | None = None

    def to_domain(self) -> ChainReceipt:
        return ChainReceipt(
            status=self.status,
            committed_value=self.committed_value,
            detail=self.detail,
        )


class BetStatusResponse(BaseModel):
    attempt_id: str
    status: str
    reason: str | None = None
    detail: str | None = None
    cancellable: bool
    tx_hash: str | None = None
    total_value: Decimal | None = None
    protected_amount: Decimal | None = None
    fee_amount: Decimal | None = None
    position: PositionOut | None = None

    @classmethod
    def from_machine(cls, machine: BetSubmission) -> "BetStatusResponse":
        state = machine.state
        handle = machine.handle
        resp = cls(
            attempt_id=machine.attempt_id,
            status=machine.status.value,
            cancellable=isinstance(state, (Validating, AwaitingSubmission)),
            tx_hash=handle.tx_hash if handle else None,
        )
        if isinstance(state, (AwaitingSubmission, AwaitingConfirmation, Confirmed)):
            resp.total_value = state.bet.total_value
            if state.bet.quote is not None:
                resp.protected_amount = state.bet.quote.protected_amount
                resp.fee_amount = state.bet.quote.payable_fee
        if isinstance(state, Confirmed):
            resp.position = PositionOut.from_domain(state.position)
        if isinstance(state, Failed):
            resp.reason = state.reason.value
            resp.detail = state.detail
        return resp
