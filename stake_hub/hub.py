"""
StakeHub: one user session against the stake program.

Owns one of each component and wires them in order: identity -> derived record
address -> initial history and snapshot pull -> submitter. Each component is
the single writer of its own state; the hub only exposes read-only views.
"""

from __future__ import annotations

from typing import Any, Callable

from stake_hub.config.settings import StakeHubSettings, get_settings
from stake_hub.core.exceptions import (
    SessionAlreadyEstablished,
    SessionNotEstablished,
    WalletUnavailable,
)
from stake_hub.history.log import HistoryEntry, HistoryLog
from stake_hub.hub_logging import bind_session, get_logger
from stake_hub.ledger.client import RemoteLedgerClient
from stake_hub.notify.queue import Notification, NotificationQueue
from stake_hub.program.derivation import DerivedAccount, derive
from stake_hub.reconcile.reconciler import AccountStateReconciler
from stake_hub.reconcile.snapshot import StakePositionSnapshot
from stake_hub.session.identity import SessionIdentity, establish
from stake_hub.session.wallet import KeypairWallet, WalletProvider
from stake_hub.tx.submitter import OperationResult, SubmitterState, TransactionSubmitter

logger = get_logger(__name__)

MSG_CONNECTED = "Wallet connected ✅"
MSG_CONNECT_ERROR = "Connect error ❌"


class StakeHub:
    def __init__(
        self,
        settings: StakeHubSettings | None = None,
        *,
        ledger: Any | None = None,
        on_transition: Callable[[SubmitterState, SubmitterState], None] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._ledger = ledger or RemoteLedgerClient(self._settings)
        self._notifications = NotificationQueue(ttl_sec=self._settings.notification_ttl_sec)
        self._history = HistoryLog(self._ledger, self._notifications, limit=self._settings.history_limit)
        self._reconciler = AccountStateReconciler(self._ledger, self._notifications)
        self._on_transition = on_transition
        self._identity: SessionIdentity | None = None
        self._account: DerivedAccount | None = None
        self._submitter: TransactionSubmitter | None = None

    # --- read-only views ---

    @property
    def identity(self) -> SessionIdentity | None:
        return self._identity

    @property
    def account(self) -> DerivedAccount | None:
        return self._account

    @property
    def snapshot(self) -> StakePositionSnapshot | None:
        return self._reconciler.snapshot

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self._history.entries

    @property
    def notification(self) -> Notification | None:
        return self._notifications.current

    @property
    def notifications(self) -> NotificationQueue:
        return self._notifications

    @property
    def busy(self) -> bool:
        return self._submitter is not None and self._submitter.busy

    @property
    def state(self) -> SubmitterState:
        return self._submitter.state if self._submitter is not None else SubmitterState.IDLE

    def default_wallet(self) -> KeypairWallet:
        return KeypairWallet(self._settings.wallet_key, self._settings.wallet_key_path or None)

    # --- session ---

    async def connect(self, wallet: WalletProvider | None = None) -> DerivedAccount:
        """
        Establish the session, derive the stake record, then pull history and
        snapshot. "Wallet connected" is posted first so a failed pull replaces it
        with its fetch-error notification. Raises WalletUnavailable after posting
        a notification.
        """
        if self._identity is not None:
            raise SessionAlreadyEstablished("session already has a connected wallet")
        try:
            identity = await establish(wallet if wallet is not None else self.default_wallet())
        except WalletUnavailable as e:
            logger.error("hub_connect_failed", error=str(e))
            self._notifications.post(MSG_CONNECT_ERROR)
            raise

        account = derive(identity.user_address, self._settings.program_id)
        self._identity = identity
        self._account = account
        self._submitter = TransactionSubmitter(
            identity,
            account,
            self._ledger,
            self._history,
            self._reconciler,
            self._notifications,
            on_transition=self._on_transition,
        )
        bind_session(str(identity.user_address)).info("hub_connected", record=str(account.address), bump=account.bump)

        self._notifications.post(MSG_CONNECTED)
        history_ok = await self._history.initialize(account.address)
        snapshot = await self._reconciler.refresh(account.address, announce=False)
        logger.info(
            "hub_session_loaded",
            history_loaded=history_ok,
            history_size=len(self._history),
            has_snapshot=snapshot is not None,
        )
        return account

    def _require_submitter(self) -> TransactionSubmitter:
        if self._submitter is None:
            raise SessionNotEstablished("connect a wallet first")
        return self._submitter

    # --- operations ---

    async def setup_account(self) -> OperationResult:
        return await self._require_submitter().setup_account()

    async def deposit(self, amount: Any) -> OperationResult:
        return await self._require_submitter().deposit(amount)

    async def withdraw(self, amount: Any) -> OperationResult:
        return await self._require_submitter().withdraw(amount)

    async def claim_reward(self) -> OperationResult:
        return await self._require_submitter().claim_reward()

    async def refresh(self) -> StakePositionSnapshot | None:
        return await self._require_submitter().refresh()

    async def close(self) -> None:
        self._notifications.clear()
        close = getattr(self._ledger, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "StakeHub":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
