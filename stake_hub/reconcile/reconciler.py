"""
Account state reconciler: replaces the local snapshot with the on-chain record.

The snapshot is swapped wholesale on a successful fetch and left untouched on
NOT_FOUND or FetchFailed. Nothing raises past refresh(); failures become a
notification and a log event.
"""

from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey

from stake_hub.core.exceptions import FetchFailed
from stake_hub.hub_logging import get_logger
from stake_hub.ledger.models import NotFound
from stake_hub.notify.queue import NotificationQueue
from stake_hub.reconcile.snapshot import StakePositionSnapshot

logger = get_logger(__name__)

MSG_FETCHED = "Data Fetched ✅"
MSG_NO_DATA = "No data yet"
MSG_FETCH_ERROR = "Fetch error ❌"


class AccountStateReconciler:
    def __init__(self, ledger: Any, notifications: NotificationQueue) -> None:
        self._ledger = ledger
        self._notifications = notifications
        self._snapshot: StakePositionSnapshot | None = None

    @property
    def snapshot(self) -> StakePositionSnapshot | None:
        return self._snapshot

    async def refresh(self, address: Pubkey, *, announce: bool = True) -> StakePositionSnapshot | None:
        """
        Fetch the record at `address` and return the current snapshot.

        announce=False suppresses the success and not-found notifications
        (used after an operation, whose own message should stay visible);
        fetch errors are always posted.
        """
        try:
            record = await self._ledger.fetch_record(address)
        except FetchFailed as e:
            logger.warning("reconcile_fetch_failed", record=str(address), error=str(e))
            self._notifications.post(MSG_FETCH_ERROR)
            return self._snapshot
        except Exception as e:
            logger.exception("reconcile_unexpected_error", record=str(address), error=str(e))
            self._notifications.post(MSG_FETCH_ERROR)
            return self._snapshot

        if isinstance(record, NotFound):
            logger.info("reconcile_no_data", record=str(address), has_prior=self._snapshot is not None)
            if announce:
                self._notifications.post(MSG_NO_DATA)
            return self._snapshot

        snapshot = StakePositionSnapshot.from_raw(record)
        self._snapshot = snapshot
        logger.info(
            "reconcile_snapshot_updated",
            record=str(address),
            staked_lamports=snapshot.staked_amount,
            unclaimed_lamports=snapshot.unclaimed_reward,
        )
        if announce:
            self._notifications.post(MSG_FETCHED)
        return snapshot
