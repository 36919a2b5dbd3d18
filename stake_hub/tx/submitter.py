"""
Transaction submitter: single-flight lifecycle for stake operations.

    IDLE -> SUBMITTING -> AWAITING_CONFIRMATION -> SUCCEEDED | AMBIGUOUS_FAILURE | FAILED -> IDLE

A manual refresh holds the same lock in the REFRESHING state. The lock is the
PendingOperation record: while it exists every other initiation is rejected
with OperationInFlight, never queued. It is released on every exit path.

Outcomes:
- SUCCEEDED: success notification, optimistic history entry, quiet snapshot refresh.
- FAILED: failure notification only.
- AMBIGUOUS_FAILURE: "unconfirmed" notification only. The operation may have
  landed, so neither history nor snapshot is touched.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable

from stake_hub.core.exceptions import (
    AmbiguousFailure,
    FaultClass,
    InvalidAmount,
    LedgerError,
    OperationInFlight,
)
from stake_hub.history.log import HistoryEntry, HistoryKind, HistoryLog
from stake_hub.hub_logging import get_logger
from stake_hub.ledger.models import (
    ConfirmationStatus,
    OperationKind,
    SubmitArgs,
    lamports_from_sol,
)
from stake_hub.notify.queue import NotificationQueue
from stake_hub.program.derivation import DerivedAccount
from stake_hub.program.layout import U64_MAX
from stake_hub.reconcile.reconciler import AccountStateReconciler
from stake_hub.reconcile.snapshot import StakePositionSnapshot
from stake_hub.session.identity import SessionIdentity

logger = get_logger(__name__)


class SubmitterState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUCCEEDED = "succeeded"
    AMBIGUOUS_FAILURE = "ambiguous_failure"
    FAILED = "failed"
    REFRESHING = "refreshing"


# (success, failure) notification text per operation
MESSAGES = {
    OperationKind.SETUP_ACCOUNT: ("Account Setup ✅", "Account setup error ❌"),
    OperationKind.DEPOSIT: ("Staked ✅", "Stake error ❌"),
    OperationKind.WITHDRAW: ("Unstaked ✅", "Unstake error ❌"),
    OperationKind.CLAIM_REWARD: ("Reward Claimed ✅", "Claim error ❌"),
}


def ambiguous_message(kind: OperationKind) -> str:
    """'Staked ✅' -> 'Staked (unconfirmed) ⚠️'."""
    success = MESSAGES[kind][0].replace("✅", "").strip()
    return f"{success} (unconfirmed) ⚠️"


@dataclass(frozen=True)
class PendingOperation:
    kind: OperationKind
    started_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class OperationResult:
    kind: OperationKind
    state: SubmitterState
    amount: Decimal | None = None
    signature: str | None = None
    fault_class: FaultClass | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is SubmitterState.SUCCEEDED


def parse_amount(value: Any) -> Decimal:
    """
    Validate a user-entered SOL amount. Raises InvalidAmount for anything that
    is not a finite number of at least one lamport.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount("Amount is required", value)
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidAmount("Amount must be a finite number", value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Amount is not a number: {value!r}", value) from None
    if not amount.is_finite():
        raise InvalidAmount("Amount must be a finite number", value)
    if amount <= 0:
        raise InvalidAmount("Amount must be positive", value)
    lamports = lamports_from_sol(amount)
    if lamports < 1:
        raise InvalidAmount("Amount is smaller than one lamport", value)
    if lamports > U64_MAX:
        raise InvalidAmount("Amount is too large", value)
    return amount


class TransactionSubmitter:
    def __init__(
        self,
        identity: SessionIdentity,
        account: DerivedAccount,
        ledger: Any,
        history: HistoryLog,
        reconciler: AccountStateReconciler,
        notifications: NotificationQueue,
        *,
        on_transition: Callable[[SubmitterState, SubmitterState], None] | None = None,
    ) -> None:
        self._identity = identity
        self._account = account
        self._ledger = ledger
        self._history = history
        self._reconciler = reconciler
        self._notifications = notifications
        self._on_transition = on_transition
        self._state = SubmitterState.IDLE
        self._pending: PendingOperation | None = None

    @property
    def state(self) -> SubmitterState:
        return self._state

    @property
    def pending(self) -> PendingOperation | None:
        return self._pending

    @property
    def busy(self) -> bool:
        return self._pending is not None

    # --- public operations ---

    async def setup_account(self) -> OperationResult:
        return await self._execute(OperationKind.SETUP_ACCOUNT, None)

    async def deposit(self, amount: Any) -> OperationResult:
        return await self._execute(OperationKind.DEPOSIT, parse_amount(amount))

    async def withdraw(self, amount: Any) -> OperationResult:
        return await self._execute(OperationKind.WITHDRAW, parse_amount(amount))

    async def claim_reward(self) -> OperationResult:
        return await self._execute(OperationKind.CLAIM_REWARD, None)

    async def refresh(self) -> StakePositionSnapshot | None:
        """Manual refresh under the single-flight lock."""
        self._acquire(OperationKind.MANUAL_REFRESH, SubmitterState.REFRESHING)
        try:
            return await self._reconciler.refresh(self._account.address, announce=True)
        finally:
            self._release()

    # --- lock and state ---

    def _acquire(self, kind: OperationKind, state: SubmitterState) -> None:
        # check-and-set with no await in between
        if self._pending is not None:
            logger.info(
                "submitter_rejected_busy",
                kind=kind.value,
                pending_kind=self._pending.kind.value,
            )
            raise OperationInFlight(self._pending.kind.value)
        self._pending = PendingOperation(kind=kind)
        self._transition(state)

    def _release(self) -> None:
        self._pending = None
        self._transition(SubmitterState.IDLE)

    def _transition(self, new: SubmitterState) -> None:
        old = self._state
        self._state = new
        logger.debug("submitter_transition", old=old.value, new=new.value)
        if self._on_transition is not None:
            try:
                self._on_transition(old, new)
            except Exception as e:
                logger.exception("submitter_transition_listener_failed", error=str(e))

    # --- lifecycle ---

    async def _execute(self, kind: OperationKind, amount: Decimal | None) -> OperationResult:
        self._acquire(kind, SubmitterState.SUBMITTING)
        try:
            return await self._run(kind, amount)
        except Exception as e:
            logger.exception("submitter_unexpected_error", kind=kind.value, error=str(e))
            return self._failed(kind, amount, None, str(e))
        finally:
            self._release()

    async def _run(self, kind: OperationKind, amount: Decimal | None) -> OperationResult:
        args = SubmitArgs(
            stake_account=self._account.address,
            amount_lamports=lamports_from_sol(amount) if amount is not None else None,
        )
        try:
            receipt = await self._ledger.submit(kind, args, self._identity.authorizer)
        except AmbiguousFailure as e:
            return self._ambiguous(kind, amount, e.signature, e.fault_class, str(e))
        except LedgerError as e:
            return self._failed(kind, amount, getattr(e, "signature", None), str(e))

        self._transition(SubmitterState.AWAITING_CONFIRMATION)
        try:
            status = await self._ledger.confirm(receipt)
        except Exception as e:
            # sent, but its fate is unknown
            return self._ambiguous(kind, amount, receipt.signature, FaultClass.SEND_FAULT, str(e))

        if status is ConfirmationStatus.CONFIRMED:
            return await self._succeeded(kind, amount, receipt.signature)
        if status is ConfirmationStatus.REJECTED:
            return self._failed(kind, amount, receipt.signature, "rejected on-chain")
        return self._ambiguous(
            kind, amount, receipt.signature, FaultClass.SEND_FAULT, "confirmation timed out"
        )

    async def _succeeded(self, kind: OperationKind, amount: Decimal | None, signature: str) -> OperationResult:
        self._transition(SubmitterState.SUCCEEDED)
        logger.info("submitter_succeeded", kind=kind.value, signature=signature, amount=str(amount) if amount is not None else None)
        self._notifications.post(MESSAGES[kind][0])
        self._history.append(HistoryEntry(kind=HistoryKind.from_operation(kind), amount=amount))
        await self._reconciler.refresh(self._account.address, announce=False)
        return OperationResult(kind, SubmitterState.SUCCEEDED, amount=amount, signature=signature)

    def _failed(
        self,
        kind: OperationKind,
        amount: Decimal | None,
        signature: str | None,
        error: str,
    ) -> OperationResult:
        self._transition(SubmitterState.FAILED)
        logger.warning("submitter_failed", kind=kind.value, signature=signature, error=error[:300])
        self._notifications.post(MESSAGES[kind][1])
        return OperationResult(
            kind,
            SubmitterState.FAILED,
            amount=amount,
            signature=signature,
            fault_class=FaultClass.DEFINITE,
            error=error,
        )

    def _ambiguous(
        self,
        kind: OperationKind,
        amount: Decimal | None,
        signature: str | None,
        fault_class: FaultClass,
        error: str,
    ) -> OperationResult:
        self._transition(SubmitterState.AMBIGUOUS_FAILURE)
        logger.warning(
            "submitter_ambiguous",
            kind=kind.value,
            signature=signature,
            fault_class=fault_class.value,
            error=error[:300],
        )
        self._notifications.post(ambiguous_message(kind))
        return OperationResult(
            kind,
            SubmitterState.AMBIGUOUS_FAILURE,
            amount=amount,
            signature=signature,
            fault_class=fault_class,
            error=error,
        )
