"""Chain submission collaborator: the only way the core touches the wallet/chain.

The host binds a concrete implementation (see infrastructure/relayer_client.py)
and passes it to the state machine explicitly.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from src.vv_common.enums import ChainStatus


@dataclass(frozen=True)
class ChainSubmissionRequest:
    market_id: str
    outcome: int  # index into market.outcomes
    total_value: Decimal  # stake + payable shield fee
    shield_enabled: bool
    shield_level: int


@dataclass(frozen=True)
class PendingHandle:
    tx_hash: str


@dataclass(frozen=True)
class SubmissionRejection:
    detail: str  # e.g. "user declined signing", "insufficient funds"


@dataclass(frozen=True)
class ChainReceipt:
    status: ChainStatus
    committed_value: Decimal | None = None  # value actually committed on chain
    detail: str | None = None


class ChainSubmitterProtocol(Protocol):
    async def submit(
        self, request: ChainSubmissionRequest
    ) -> PendingHandle | SubmissionRejection: ...

    async def observe(self, handle: PendingHandle) -> ChainReceipt: ...
