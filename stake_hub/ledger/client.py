"""
Remote ledger client, the only component that talks to Solana RPC.

Responsibilities:
- Read the stake record (getAccountInfo) and its recent activity (getSignaturesForAddress).
- Build, sign, and send stake program transactions.
- Poll getSignatureStatuses until confirmed, rejected, or the confirm timeout.
- Convert every RPC response and failure into the typed contract in ledger.models
  and the exceptions in core.exceptions. No business validation happens here.
"""

from __future__ import annotations

import asyncio
from typing import Any

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from stake_hub.config.env import mask_rpc_url
from stake_hub.config.settings import StakeHubSettings
from stake_hub.core.exceptions import (
    AmbiguousFailure,
    FetchFailed,
    SubmissionRejected,
)
from stake_hub.hub_logging import get_logger
from stake_hub.ledger.faults import classify_send_error, describe_error
from stake_hub.ledger.models import (
    NOT_FOUND,
    ActivityRecord,
    ConfirmationStatus,
    NotFound,
    OperationKind,
    PendingReceipt,
    SubmitArgs,
)
from stake_hub.program.layout import (
    RawStakeAccount,
    build_instruction,
    parse_stake_account_data,
)

logger = get_logger(__name__)

MAX_ACTIVITY_LIMIT = 1000

# Statuses that satisfy each commitment level
_ACCEPTED_STATUSES = {
    "processed": (
        TransactionConfirmationStatus.Processed,
        TransactionConfirmationStatus.Confirmed,
        TransactionConfirmationStatus.Finalized,
    ),
    "confirmed": (
        TransactionConfirmationStatus.Confirmed,
        TransactionConfirmationStatus.Finalized,
    ),
    "finalized": (TransactionConfirmationStatus.Finalized,),
}


class RemoteLedgerClient:
    """
    Async wrapper around solana-py's AsyncClient for one stake program.

    The RPC client is created lazily so constructing the ledger client never
    touches the network; tests inject a mock via `rpc`.
    """

    def __init__(
        self,
        settings: StakeHubSettings,
        *,
        rpc: Any | None = None,
    ) -> None:
        self._settings = settings
        self._program_id = Pubkey.from_string(settings.program_id)
        self._commitment = Commitment(settings.commitment)
        self._rpc = rpc

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    def _rpc_ensure(self) -> Any:
        if self._rpc is None:
            self._rpc = AsyncClient(
                self._settings.rpc_url,
                commitment=self._commitment,
                timeout=self._settings.request_timeout_sec,
            )
            logger.debug("ledger_rpc_client_created", rpc_url=mask_rpc_url(self._settings.rpc_url))
        return self._rpc

    async def close(self) -> None:
        if self._rpc is not None:
            await self._rpc.close()
            self._rpc = None

    async def __aenter__(self) -> "RemoteLedgerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # --- reads ---

    async def fetch_record(self, address: Pubkey) -> RawStakeAccount | NotFound:
        """Return the decoded stake record, or NOT_FOUND when the account does not exist."""
        rpc = self._rpc_ensure()
        try:
            resp = await rpc.get_account_info(
                address, commitment=self._commitment, encoding="base64"
            )
        except Exception as e:
            logger.warning("ledger_fetch_record_failed", record=str(address), error=describe_error(e))
            raise FetchFailed(f"getAccountInfo failed: {describe_error(e)}") from e

        account = getattr(resp, "value", None)
        if account is None or not getattr(account, "data", None):
            logger.info("ledger_record_not_found", record=str(address))
            return NOT_FOUND
        try:
            return parse_stake_account_data(bytes(account.data))
        except ValueError as e:
            logger.error("ledger_record_decode_failed", record=str(address), error=str(e))
            raise FetchFailed(str(e)) from e

    async def fetch_recent_activity(self, address: Pubkey, limit: int) -> list[ActivityRecord]:
        """Return up to `limit` signatures touching the record, newest first."""
        if not 1 <= limit <= MAX_ACTIVITY_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_ACTIVITY_LIMIT}")
        rpc = self._rpc_ensure()
        try:
            resp = await rpc.get_signatures_for_address(
                address, limit=limit, commitment=self._commitment
            )
        except Exception as e:
            logger.warning("ledger_fetch_activity_failed", record=str(address), error=describe_error(e))
            raise FetchFailed(f"getSignaturesForAddress failed: {describe_error(e)}") from e

        records: list[ActivityRecord] = []
        for item in getattr(resp, "value", None) or []:
            try:
                records.append(ActivityRecord.from_rpc_item(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.debug("ledger_skip_activity_item", error=str(e))
        return records[:limit]

    # --- writes ---

    def _build_transaction(
        self,
        kind: OperationKind,
        args: SubmitArgs,
        authorizer: Any,
        blockhash: Any,
    ) -> Transaction:
        owner = authorizer.pubkey()
        ix = build_instruction(
            kind.instruction,
            self._program_id,
            args.stake_account,
            owner,
            amount=args.amount_lamports if kind.takes_amount else None,
        )
        message = Message.new_with_blockhash([ix], owner, blockhash)
        return Transaction([authorizer], message, blockhash)

    async def submit(
        self,
        kind: OperationKind,
        args: SubmitArgs,
        authorizer: Any,
    ) -> PendingReceipt:
        """
        Sign and send one stake program transaction.

        Raises SubmissionRejected when nothing can have landed, and
        AmbiguousFailure when the fault is consistent with the transaction
        having been processed. The signature is known before sending, so an
        ambiguous failure still carries it.
        """
        rpc = self._rpc_ensure()
        try:
            bh_resp = await rpc.get_latest_blockhash(self._commitment)
            blockhash = bh_resp.value.blockhash
        except Exception as e:
            logger.warning("ledger_blockhash_failed", kind=kind.value, error=describe_error(e))
            raise SubmissionRejected(f"Could not fetch latest blockhash: {describe_error(e)}") from e

        try:
            tx = self._build_transaction(kind, args, authorizer, blockhash)
        except ValueError as e:
            raise SubmissionRejected(f"Could not build {kind.value} transaction: {e}") from e
        signature = str(tx.signatures[0])

        opts = TxOpts(skip_confirmation=True, preflight_commitment=self._commitment)
        try:
            resp = await rpc.send_raw_transaction(bytes(tx), opts=opts)
        except Exception as e:
            fault = classify_send_error(e)
            detail = describe_error(e)
            logger.warning(
                "ledger_send_failed",
                kind=kind.value,
                signature=signature,
                fault_class=fault.value,
                error=detail[:300],
            )
            if fault.is_ambiguous:
                raise AmbiguousFailure(detail, fault_class=fault, signature=signature) from e
            raise SubmissionRejected(detail, signature=signature) from e

        sent = getattr(resp, "value", None)
        if sent is not None and str(sent) != signature:
            logger.warning("ledger_signature_mismatch", expected=signature, returned=str(sent))
            signature = str(sent)
        logger.info("ledger_tx_sent", kind=kind.value, signature=signature)
        return PendingReceipt(signature=signature, kind=kind)

    async def confirm(self, receipt: PendingReceipt) -> ConfirmationStatus:
        """
        Poll signature status until the configured commitment is reached, the
        transaction fails on-chain, or confirm_timeout_sec elapses.
        RPC errors while polling are logged and polling continues.
        """
        rpc = self._rpc_ensure()
        accepted = _ACCEPTED_STATUSES[self._settings.commitment]
        sig = Signature.from_string(receipt.signature)
        interval = self._settings.confirm_poll_interval_sec
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._settings.confirm_timeout_sec
        last_status: Any = None

        while True:
            try:
                resp = await rpc.get_signature_statuses([sig])
                statuses = getattr(resp, "value", None) or []
                st = statuses[0] if statuses else None
                if st is not None:
                    if st.err is not None:
                        logger.warning(
                            "ledger_tx_rejected",
                            signature=receipt.signature,
                            kind=receipt.kind.value,
                            err=str(st.err),
                        )
                        return ConfirmationStatus.REJECTED
                    last_status = st.confirmation_status
                    if last_status in accepted:
                        logger.info(
                            "ledger_tx_confirmed",
                            signature=receipt.signature,
                            kind=receipt.kind.value,
                            confirmation_status=str(last_status),
                            slot=st.slot,
                        )
                        return ConfirmationStatus.CONFIRMED
            except Exception as e:
                logger.warning("ledger_confirm_poll_error", signature=receipt.signature, error=describe_error(e))
            if loop.time() + interval > deadline:
                break
            await asyncio.sleep(interval)

        logger.warning(
            "ledger_confirm_timeout",
            signature=receipt.signature,
            kind=receipt.kind.value,
            last_status=str(last_status) if last_status is not None else None,
            timeout_sec=self._settings.confirm_timeout_sec,
        )
        return ConfirmationStatus.STILL_PENDING
