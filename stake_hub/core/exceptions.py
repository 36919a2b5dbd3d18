"""
Application-level exceptions.

Every operation boundary classifies its failures into one of these. Only the
precondition errors (InvalidAmount, OperationInFlight, SessionNotEstablished,
SessionAlreadyEstablished) and WalletUnavailable reach the presentation layer;
the rest are turned into a notification by the component that caught them.
"""

from __future__ import annotations

from enum import Enum


class FaultClass(str, Enum):
    """Transport fault classification for a failed submission."""

    DEFINITE = "definite"
    """Nothing landed: preflight rejection, bad blockhash, malformed tx."""
    ALREADY_PROCESSED = "already_processed"
    """The cluster reports the transaction as already processed."""
    SEND_FAULT = "send_fault"
    """Send-level fault after the request left the client (timeout, dropped connection)."""

    @property
    def is_ambiguous(self) -> bool:
        return self is not FaultClass.DEFINITE


class StakeHubError(Exception):
    """Base class for all stake client errors."""


class WalletUnavailable(StakeHubError):
    """No wallet capability could be connected. Fatal for the session."""


class InvalidAmount(StakeHubError):
    """Deposit/withdraw amount is not a positive number."""

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.value = value


class OperationInFlight(StakeHubError):
    """Another operation holds the single-flight lock."""

    def __init__(self, pending_kind: str):
        super().__init__(f"operation already in flight: {pending_kind}")
        self.pending_kind = pending_kind


class SessionNotEstablished(StakeHubError):
    """An operation was requested before a wallet was connected."""


class SessionAlreadyEstablished(StakeHubError):
    """connect() was called on a session that already has an identity."""


class DerivationError(StakeHubError):
    """Record address derivation failed; indicates a configuration error."""


class LedgerError(StakeHubError):
    """Base for failures at the RPC boundary."""


class FetchFailed(LedgerError):
    """Reading the record or its activity failed."""


class SubmissionRejected(LedgerError):
    """Definite remote failure: the operation did not apply."""

    def __init__(self, message: str, signature: str | None = None):
        super().__init__(message)
        self.signature = signature


class AmbiguousFailure(LedgerError):
    """Transport fault consistent with the operation having already applied."""

    def __init__(
        self,
        message: str,
        fault_class: FaultClass = FaultClass.SEND_FAULT,
        signature: str | None = None,
    ):
        super().__init__(message)
        self.fault_class = fault_class
        self.signature = signature
