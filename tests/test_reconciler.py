"""
Tests for AccountStateReconciler and snapshot normalization.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

from solders.pubkey import Pubkey

from conftest import make_raw
from stake_hub.core.exceptions import FetchFailed
from stake_hub.ledger.models import NOT_FOUND
from stake_hub.notify.queue import NotificationQueue
from stake_hub.reconcile.reconciler import AccountStateReconciler
from stake_hub.reconcile.snapshot import StakePositionSnapshot, lamports_to_sol

OWNER = Pubkey.new_unique()
RECORD = Pubkey.new_unique()


def _run_refresh(reconciler, notes, **kwargs):
    async def scenario():
        snap = await reconciler.refresh(RECORD, **kwargs)
        return snap, notes.current

    return asyncio.run(scenario())


def test_not_found_leaves_snapshot_absent(fake_ledger):
    """Never set up: no snapshot, 'No data yet' posted, nothing raised."""
    notes = NotificationQueue(ttl_sec=0.05)
    reconciler = AccountStateReconciler(fake_ledger, notes)
    fake_ledger.record = NOT_FOUND

    snap, note = _run_refresh(reconciler, notes)

    assert snap is None
    assert reconciler.snapshot is None
    assert note.message == "No data yet"


def test_not_found_keeps_prior_snapshot(fake_ledger):
    notes = NotificationQueue(ttl_sec=0.05)
    reconciler = AccountStateReconciler(fake_ledger, notes)
    fake_ledger.record = make_raw(OWNER)
    first, _ = _run_refresh(reconciler, notes)

    fake_ledger.record = NOT_FOUND
    again, _ = _run_refresh(reconciler, notes)

    assert again is first
    assert reconciler.snapshot is first


def test_fetch_failure_keeps_prior_snapshot(fake_ledger):
    notes = NotificationQueue(ttl_sec=0.05)
    reconciler = AccountStateReconciler(fake_ledger, notes)
    fake_ledger.record = make_raw(OWNER)
    first, _ = _run_refresh(reconciler, notes)

    fake_ledger.fetch_error = FetchFailed("timeout")
    snap, note = _run_refresh(reconciler, notes, announce=False)

    assert snap is first
    assert note.message == "Fetch error ❌"


def test_unexpected_error_does_not_escape(fake_ledger):
    notes = NotificationQueue(ttl_sec=0.05)
    reconciler = AccountStateReconciler(fake_ledger, notes)
    fake_ledger.fetch_error = RuntimeError("decoder bug")
    snap, note = _run_refresh(reconciler, notes)
    assert snap is None
    assert note.message == "Fetch error ❌"


def test_success_replaces_snapshot_wholesale(fake_ledger):
    notes = NotificationQueue(ttl_sec=0.05)
    reconciler = AccountStateReconciler(fake_ledger, notes)
    fake_ledger.record = make_raw(OWNER, amount=1_000_000_000, reward=10)
    first, note = _run_refresh(reconciler, notes)
    assert note.message == "Data Fetched ✅"

    fake_ledger.record = make_raw(OWNER, amount=3_000_000_000, reward=0)
    second, note = _run_refresh(reconciler, notes, announce=False)

    assert second is not first
    assert second.staked_amount == 3_000_000_000
    assert second.unclaimed_reward == 0
    assert note is None


def test_snapshot_stays_integral():
    snap = StakePositionSnapshot.from_raw(make_raw(OWNER, amount=2_500_000_001))
    assert snap.staked_amount == 2_500_000_001
    assert isinstance(snap.staked_amount, int)
    assert snap.owner == str(OWNER)


def test_display_uses_four_decimals():
    snap = StakePositionSnapshot.from_raw(
        make_raw(OWNER, amount=2_500_000_000, reward=50_000, claimed_reward=49_999)
    )
    display = snap.to_display()
    assert display["Owner"] == str(OWNER)
    assert display["Staked Amount (SOL)"] == "2.5000"
    assert display["Unclaimed Reward (SOL)"] == "0.0001"
    assert display["Claimed Reward (SOL)"] == "0.0000"
    assert "Last Activity" in display


def test_lamports_to_sol():
    assert lamports_to_sol(1_000_000_000) == Decimal("1.0000")
    assert lamports_to_sol(123_456_789) == Decimal("0.1235")
    assert lamports_to_sol(0) == Decimal("0.0000")
