"""
Typed contract at the RPC boundary.

Operation kinds, confirmation tags, submission receipts, and normalized
activity records. Remote responses are converted into these types inside the
ledger client so nothing downstream inspects raw RPC objects.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Final

from solders.pubkey import Pubkey

from stake_hub.program.layout import (
    IX_CLAIM_REWARD,
    IX_INITIALIZE,
    IX_STAKE,
    IX_UNSTAKE,
)

LAMPORTS_PER_SOL = 1_000_000_000


class OperationKind(str, Enum):
    """User-initiated operations; all serialized through the single-flight lock."""

    SETUP_ACCOUNT = "setup_account"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    CLAIM_REWARD = "claim_reward"
    MANUAL_REFRESH = "manual_refresh"

    @property
    def takes_amount(self) -> bool:
        return self in (OperationKind.DEPOSIT, OperationKind.WITHDRAW)

    @property
    def instruction(self) -> str:
        """Stake program instruction name; ManualRefresh has none."""
        try:
            return _INSTRUCTION_BY_KIND[self]
        except KeyError:
            raise ValueError(f"{self.value} is not submitted on-chain") from None


_INSTRUCTION_BY_KIND = {
    OperationKind.SETUP_ACCOUNT: IX_INITIALIZE,
    OperationKind.DEPOSIT: IX_STAKE,
    OperationKind.WITHDRAW: IX_UNSTAKE,
    OperationKind.CLAIM_REWARD: IX_CLAIM_REWARD,
}


class ConfirmationStatus(str, Enum):
    """Outcome of waiting on a submitted transaction."""

    CONFIRMED = "confirmed"
    STILL_PENDING = "still_pending"
    REJECTED = "rejected"


class NotFound(Enum):
    """Tag returned by fetch_record when the stake record does not exist."""

    NOT_FOUND = "not_found"


NOT_FOUND: Final = NotFound.NOT_FOUND


@dataclass(frozen=True)
class SubmitArgs:
    """Arguments for one on-chain operation against the stake record."""

    stake_account: Pubkey
    amount_lamports: int | None = None


@dataclass(frozen=True)
class PendingReceipt:
    """A transaction that has been sent but not yet confirmed."""

    signature: str
    kind: OperationKind
    submitted_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ActivityRecord:
    """
    Normalized signature info for the stake record from getSignaturesForAddress.

    Mirrors the RPC response fields; newest first as returned by the node.
    """

    signature: str
    slot: int
    err: Any  # None if the transaction succeeded
    block_time: int | None  # Unix timestamp; None if not available
    memo: str | None
    confirmation_status: str | None  # processed | confirmed | finalized

    @property
    def succeeded(self) -> bool:
        return self.err is None

    @classmethod
    def from_rpc_item(cls, item: Any) -> "ActivityRecord":
        """Build from one RpcConfirmedTransactionStatusWithSignature (solders) or JSON dict."""
        if isinstance(item, dict):
            return cls(
                signature=item["signature"],
                slot=int(item["slot"]),
                err=item.get("err"),
                block_time=item.get("blockTime"),
                memo=item.get("memo"),
                confirmation_status=item.get("confirmationStatus"),
            )
        status = getattr(item, "confirmation_status", None)
        return cls(
            signature=str(item.signature),
            slot=int(item.slot),
            err=item.err,
            block_time=item.block_time,
            memo=item.memo,
            confirmation_status=_status_name(status),
        )


def _status_name(status: Any) -> str | None:
    """TransactionConfirmationStatus.Confirmed -> 'confirmed'."""
    if status is None:
        return None
    return str(status).rsplit(".", 1)[-1].lower()


def lamports_from_sol(amount: Decimal) -> int:
    """Convert a SOL amount to integral lamports, truncating sub-lamport precision."""
    return int(amount * LAMPORTS_PER_SOL)
