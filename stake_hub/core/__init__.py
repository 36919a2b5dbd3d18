"""
Core shared types: the exception hierarchy and transport fault classes.
"""

from stake_hub.core.exceptions import (
    AmbiguousFailure,
    DerivationError,
    FaultClass,
    FetchFailed,
    InvalidAmount,
    LedgerError,
    OperationInFlight,
    SessionAlreadyEstablished,
    SessionNotEstablished,
    StakeHubError,
    SubmissionRejected,
    WalletUnavailable,
)

__all__ = [
    "AmbiguousFailure",
    "DerivationError",
    "FaultClass",
    "FetchFailed",
    "InvalidAmount",
    "LedgerError",
    "OperationInFlight",
    "SessionAlreadyEstablished",
    "SessionNotEstablished",
    "StakeHubError",
    "SubmissionRejected",
    "WalletUnavailable",
]
