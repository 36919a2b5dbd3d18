"""
Classify send-transaction failures into a FaultClass.

A failed send is not always a failed operation: the node may already have the
transaction, or the request may have reached the cluster before the connection
dropped. Structured solders error payloads are inspected first; matching the
error text is a best-effort fallback and is logged as such. Neither path ever
produces a success, only DEFINITE or one of the ambiguous classes.
"""

from __future__ import annotations

from typing import Any

import httpx
from solana.exceptions import SolanaRpcException
from solders.transaction_status import TransactionErrorFieldless

from stake_hub.core.exceptions import FaultClass
from stake_hub.hub_logging import get_logger

logger = get_logger(__name__)

ALREADY_PROCESSED_MARKERS = (
    "already been processed",
    "alreadyprocessed",
    "already processed",
)

# Raised after the request was written: the node may have received it
_SEND_FAULT_ERRORS = (
    httpx.TimeoutException,
    httpx.RemoteProtocolError,
    httpx.ReadError,
    httpx.WriteError,
)
# Raised before anything reached the node
_DEFINITE_TRANSPORT_ERRORS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
)


def unwrap_rpc_error(exc: BaseException) -> BaseException:
    """
    Return the transport error behind a SolanaRpcException.

    solana-py re-raises every httpx error from its providers as
    SolanaRpcException(...) from the original, with empty args.
    """
    if isinstance(exc, SolanaRpcException):
        inner = exc.__cause__ or exc.__context__
        if inner is not None:
            return inner
    return exc


def describe_error(exc: BaseException) -> str:
    """Loggable text for an exception; wrapper exceptions often have an empty str()."""
    text = getattr(exc, "error_msg", None) or str(exc)
    return text if text else repr(exc)


def _transaction_error(exc: BaseException) -> Any:
    """Dig the TransactionError out of an RPCException preflight payload, if any."""
    for arg in getattr(exc, "args", ()):
        data = getattr(arg, "data", None)
        err = getattr(data, "err", None)
        if err is not None:
            return err
        err = getattr(arg, "err", None)
        if err is not None:
            return err
    return None


def classify_send_error(exc: BaseException) -> FaultClass:
    """Return the FaultClass for an exception raised while sending a transaction."""
    exc = unwrap_rpc_error(exc)
    # ConnectTimeout is a TimeoutException; check the pre-send errors first
    if isinstance(exc, _DEFINITE_TRANSPORT_ERRORS):
        return FaultClass.DEFINITE
    if isinstance(exc, _SEND_FAULT_ERRORS):
        return FaultClass.SEND_FAULT

    tx_err = _transaction_error(exc)
    if tx_err is not None:
        if tx_err == TransactionErrorFieldless.AlreadyProcessed:
            return FaultClass.ALREADY_PROCESSED
        return FaultClass.DEFINITE

    text = str(exc).lower()
    if any(marker in text for marker in ALREADY_PROCESSED_MARKERS):
        logger.warning(
            "send_fault_matched_by_message",
            fault_class=FaultClass.ALREADY_PROCESSED.value,
            error=describe_error(exc)[:200],
        )
        return FaultClass.ALREADY_PROCESSED
    return FaultClass.DEFINITE
