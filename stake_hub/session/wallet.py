"""
Wallet capability: the source of the user's address and signing authority.

KeypairWallet loads a solders Keypair from a base58 secret or a JSON array of
64 bytes (Solana CLI id.json), given inline or as a file path.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from stake_hub.core.exceptions import WalletUnavailable
from stake_hub.hub_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class WalletConnection:
    user_address: Pubkey
    authorizer: Any  # opaque signer, only handed to the ledger client


class WalletProvider(Protocol):
    async def connect(self) -> WalletConnection: ...


def load_keypair(secret: str) -> Keypair:
    """Load Keypair from a base58 string or JSON array of 64 bytes."""
    raw = secret.strip()
    if not raw:
        raise ValueError("empty wallet key")
    if raw.startswith("["):
        try:
            arr = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError("wallet key is not a valid JSON byte array") from e
        if not isinstance(arr, list) or len(arr) < 64:
            raise ValueError("wallet key JSON array must hold 64 bytes")
        try:
            return Keypair.from_bytes(bytes(arr[:64]))
        except Exception as e:
            raise ValueError("wallet key JSON array is not a valid keypair") from e
    try:
        return Keypair.from_bytes(base58.b58decode(raw))
    except Exception as e:
        raise ValueError("wallet key is not a valid base58 keypair") from e


class KeypairWallet:
    """Wallet backed by a local keypair (inline secret or key file)."""

    def __init__(self, secret: str = "", path: str | Path | None = None) -> None:
        self._secret = secret
        self._path = Path(path).expanduser() if path else None

    def _read_secret(self) -> str:
        if self._secret.strip():
            return self._secret
        if self._path is not None:
            try:
                return self._path.read_text(encoding="utf-8")
            except OSError as e:
                raise WalletUnavailable(f"Cannot read wallet key file {self._path}: {e}") from e
        raise WalletUnavailable("No wallet configured: set STAKE_HUB_WALLET_KEY or STAKE_HUB_WALLET_PATH")

    async def connect(self) -> WalletConnection:
        secret = self._read_secret()
        try:
            keypair = load_keypair(secret)
        except ValueError as e:
            logger.warning("wallet_keypair_load_failed", error=str(e))
            raise WalletUnavailable(f"Invalid wallet key: {e}") from e
        return WalletConnection(user_address=keypair.pubkey(), authorizer=keypair)
