"""
Remote ledger boundary: typed RPC contract, fault classification, and client.
"""

from stake_hub.ledger.client import RemoteLedgerClient
from stake_hub.ledger.faults import classify_send_error
from stake_hub.ledger.models import (
    LAMPORTS_PER_SOL,
    NOT_FOUND,
    ActivityRecord,
    ConfirmationStatus,
    NotFound,
    OperationKind,
    PendingReceipt,
    SubmitArgs,
)

__all__ = [
    "LAMPORTS_PER_SOL",
    "NOT_FOUND",
    "ActivityRecord",
    "ConfirmationStatus",
    "NotFound",
    "OperationKind",
    "PendingReceipt",
    "RemoteLedgerClient",
    "SubmitArgs",
    "classify_send_error",
]
