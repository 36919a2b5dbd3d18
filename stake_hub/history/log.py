"""
Bounded rolling history of stake operations, newest first.

Two provenances share the log:
- externally observed: pulled from getSignaturesForAddress on the stake record,
  carries the transaction signature as external_ref;
- optimistic: appended by the submitter after a confirmed operation, carries
  the user-entered amount and no external_ref.
The two are not merged or de-duplicated.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from solders.pubkey import Pubkey

from stake_hub.config.env import explorer_tx_url
from stake_hub.config.settings import DEFAULT_HISTORY_LIMIT
from stake_hub.core.exceptions import FetchFailed
from stake_hub.hub_logging import get_logger
from stake_hub.ledger.models import ActivityRecord, OperationKind
from stake_hub.notify.queue import NotificationQueue

logger = get_logger(__name__)

HISTORY_LIMIT = DEFAULT_HISTORY_LIMIT
MSG_HISTORY_FETCH_ERROR = "History fetch error ❌"


class HistoryKind(str, Enum):
    SETUP_ACCOUNT = "Setup Account"
    DEPOSIT = "Stake"
    WITHDRAW = "Unstake"
    CLAIM_REWARD = "Claim Reward"
    EXTERNAL_ACTIVITY = "Activity"

    @classmethod
    def from_operation(cls, kind: OperationKind) -> "HistoryKind":
        return cls[kind.name]


@dataclass(frozen=True)
class HistoryEntry:
    kind: HistoryKind
    amount: Decimal | None = None
    timestamp: float = field(default_factory=time.time)
    external_ref: str | None = None
    failed: bool = False

    @classmethod
    def from_activity(cls, record: ActivityRecord) -> "HistoryEntry":
        return cls(
            kind=HistoryKind.EXTERNAL_ACTIVITY,
            timestamp=float(record.block_time) if record.block_time is not None else time.time(),
            external_ref=record.signature,
            failed=not record.succeeded,
        )

    def explorer_url(self, cluster: str | None = None) -> str | None:
        if not self.external_ref:
            return None
        return explorer_tx_url(self.external_ref, cluster)

    def describe(self) -> str:
        """One-line text: '<kind> <amount> SOL at <local time>'."""
        parts = [self.kind.value]
        if self.amount is not None:
            parts.append(f"{self.amount} SOL")
        if self.failed:
            parts.append("(failed)")
        when = datetime.fromtimestamp(self.timestamp).strftime("%Y-%m-%d %H:%M:%S")
        return " ".join(parts) + f" at {when}"


class HistoryLog:
    """Rolling log; len(entries) <= limit after every append/initialize."""

    def __init__(
        self,
        ledger: Any,
        notifications: NotificationQueue,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        if not 1 <= limit <= HISTORY_LIMIT:
            raise ValueError(f"limit must be between 1 and {HISTORY_LIMIT}")
        self._ledger = ledger
        self._notifications = notifications
        self._limit = limit
        self._entries: list[HistoryEntry] = []

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def append(self, entry: HistoryEntry) -> None:
        self._entries.insert(0, entry)
        del self._entries[self._limit:]
        logger.debug("history_appended", kind=entry.kind.value, size=len(self._entries))

    async def initialize(self, address: Pubkey) -> bool:
        """
        Replace the log with the most recent observed activity for `address`.
        On failure the prior log is kept and a notification is posted; nothing
        raises past this call. Returns True when the log was replaced.
        """
        try:
            records = await self._ledger.fetch_recent_activity(address, self._limit)
        except FetchFailed as e:
            logger.warning("history_initialize_failed", record=str(address), error=str(e))
            self._notifications.post(MSG_HISTORY_FETCH_ERROR)
            return False
        except Exception as e:
            logger.exception("history_unexpected_error", record=str(address), error=str(e))
            self._notifications.post(MSG_HISTORY_FETCH_ERROR)
            return False
        self._entries = [HistoryEntry.from_activity(r) for r in records[: self._limit]]
        logger.info("history_initialized", record=str(address), size=len(self._entries))
        return True
