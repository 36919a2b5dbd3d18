from stake_hub.tx.submitter import (
    MESSAGES,
    OperationResult,
    PendingOperation,
    SubmitterState,
    TransactionSubmitter,
    ambiguous_message,
    parse_amount,
)

__all__ = [
    "MESSAGES",
    "OperationResult",
    "PendingOperation",
    "SubmitterState",
    "TransactionSubmitter",
    "ambiguous_message",
    "parse_amount",
]
