"""
Pytest fixtures for stake client tests.

FakeLedger stands in for RemoteLedgerClient so no test touches Solana RPC.
Async code is driven with asyncio.run() inside plain test functions.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import base58
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from stake_hub.config.env import DEFAULT_PROGRAM_ID
from stake_hub.config.settings import StakeHubSettings
from stake_hub.history.log import HistoryLog
from stake_hub.ledger.models import (
    NOT_FOUND,
    ActivityRecord,
    ConfirmationStatus,
    PendingReceipt,
)
from stake_hub.notify.queue import NotificationQueue
from stake_hub.program.derivation import derive
from stake_hub.program.layout import RawStakeAccount
from stake_hub.reconcile.reconciler import AccountStateReconciler
from stake_hub.session.identity import SessionIdentity
from stake_hub.tx.submitter import TransactionSubmitter

# Short TTL so expiry can be observed in tests
TEST_TTL_SEC = 0.05


def user_keypair(seed: int = 1) -> Keypair:
    return Keypair.from_seed(bytes([seed]) * 32)


def keypair_secret(kp: Keypair) -> str:
    return base58.b58encode(bytes(kp)).decode()


def make_raw(owner: Pubkey, amount: int = 2_500_000_000, reward: int = 0, **overrides: int) -> RawStakeAccount:
    fields: dict[str, Any] = {
        "owner": owner,
        "amount": amount,
        "reward": reward,
        "claimed_reward": 0,
        "last_stake_time": 1_735_689_600,
        "total_deposited": amount,
        "total_withdrawn": 0,
        "total_rewards_earned": reward,
    }
    fields.update(overrides)
    return RawStakeAccount(**fields)


def make_activity(n: int) -> list[ActivityRecord]:
    """n observed signatures, newest first."""
    return [
        ActivityRecord(
            signature=f"sig{n - i:03d}",
            slot=1000 + n - i,
            err=None,
            block_time=1_735_689_600 + n - i,
            memo=None,
            confirmation_status="finalized",
        )
        for i in range(n)
    ]


class FakeLedger:
    """In-memory RemoteLedgerClient with scriptable outcomes."""

    def __init__(self) -> None:
        self.record: Any = NOT_FOUND
        self.activity: list[ActivityRecord] = []
        self.fetch_error: Exception | None = None
        self.activity_error: Exception | None = None
        self.submit_error: Exception | None = None
        self.confirm_status = ConfirmationStatus.CONFIRMED
        self.confirm_error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.fetch_calls: list[Pubkey] = []
        self.activity_calls: list[tuple[Pubkey, int]] = []
        self.submitted: list[tuple[Any, Any, Any]] = []
        self.closed = False

    async def fetch_record(self, address: Pubkey) -> Any:
        self.fetch_calls.append(address)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.record

    async def fetch_recent_activity(self, address: Pubkey, limit: int) -> list[ActivityRecord]:
        self.activity_calls.append((address, limit))
        if self.activity_error is not None:
            raise self.activity_error
        return self.activity[:limit]

    async def submit(self, kind: Any, args: Any, authorizer: Any) -> PendingReceipt:
        self.submitted.append((kind, args, authorizer))
        if self.gate is not None:
            await self.gate.wait()
        if self.submit_error is not None:
            raise self.submit_error
        return PendingReceipt(signature=f"sent{len(self.submitted)}", kind=kind)

    async def confirm(self, receipt: PendingReceipt) -> ConfirmationStatus:
        if self.confirm_error is not None:
            raise self.confirm_error
        return self.confirm_status

    async def close(self) -> None:
        self.closed = True


@dataclass
class Components:
    ledger: FakeLedger
    notifications: NotificationQueue
    history: HistoryLog
    reconciler: AccountStateReconciler
    submitter: TransactionSubmitter
    identity: SessionIdentity
    transitions: list


@pytest.fixture
def settings() -> StakeHubSettings:
    return StakeHubSettings(
        rpc_url="http://127.0.0.1:8899",
        program_id=DEFAULT_PROGRAM_ID,
        explorer_cluster="devnet",
        commitment="confirmed",
        confirm_timeout_sec=0.05,
        confirm_poll_interval_sec=0.01,
        request_timeout_sec=5.0,
        notification_ttl_sec=TEST_TTL_SEC,
        wallet_key="",
        wallet_key_path="",
    )


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def components(fake_ledger) -> Components:
    """Fully wired submitter over FakeLedger; transitions records every new state."""
    kp = user_keypair()
    identity = SessionIdentity(user_address=kp.pubkey(), authorizer=kp)
    account = derive(kp.pubkey(), DEFAULT_PROGRAM_ID)
    notifications = NotificationQueue(ttl_sec=TEST_TTL_SEC)
    history = HistoryLog(fake_ledger, notifications)
    reconciler = AccountStateReconciler(fake_ledger, notifications)
    transitions: list = []
    submitter = TransactionSubmitter(
        identity,
        account,
        fake_ledger,
        history,
        reconciler,
        notifications,
        on_transition=lambda old, new: transitions.append(new),
    )
    return Components(
        ledger=fake_ledger,
        notifications=notifications,
        history=history,
        reconciler=reconciler,
        submitter=submitter,
        identity=identity,
        transitions=transitions,
    )
