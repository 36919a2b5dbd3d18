"""
Session identity: the connected user's address and signing capability.

One per session; the authorizer is held in memory only and never inspected
outside the ledger client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from solders.pubkey import Pubkey

from stake_hub.core.exceptions import WalletUnavailable
from stake_hub.hub_logging import get_logger
from stake_hub.session.wallet import WalletProvider

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionIdentity:
    user_address: Pubkey
    authorizer: Any = field(repr=False)


async def establish(wallet: WalletProvider | None) -> SessionIdentity:
    """Connect the wallet and return the session identity. Raises WalletUnavailable."""
    if wallet is None:
        raise WalletUnavailable("No wallet provider available")
    try:
        conn = await wallet.connect()
    except WalletUnavailable:
        raise
    except Exception as e:
        logger.warning("session_wallet_connect_failed", error=str(e))
        raise WalletUnavailable(f"Wallet connect failed: {e}") from e
    identity = SessionIdentity(user_address=conn.user_address, authorizer=conn.authorizer)
    logger.info("session_established", user_address=str(identity.user_address))
    return identity
