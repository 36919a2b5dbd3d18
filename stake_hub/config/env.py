"""
Environment variable loading and validation for Stake Hub.

- SOLANA_NETWORK: devnet | mainnet (default: devnet)
- SOLANA_RPC_URL: RPC endpoint (overrides the network default)
- STAKE_PROGRAM_ID: Deployed stake program ID
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is stake_hub/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

# Devnet deployment of the stake program (declare_id!)
DEFAULT_PROGRAM_ID = "2wapyHPxoMmEgDT9RXWXrPARHbgAwVskHtu9LDjhMsT5"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
EXPLORER_TX_URL_TEMPLATE = "https://explorer.solana.com/tx/{signature}?cluster={cluster}"


def load_stake_hub_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """
    Return SOLANA_NETWORK from env: devnet | mainnet.
    Default: devnet.
    """
    load_stake_hub_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "devnet").strip().lower()
    if raw in ("mainnet", "mainnet-beta"):
        return "mainnet"
    return "devnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > devnet/mainnet default.
    """
    load_stake_hub_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    return DEVNET_RPC_URL if get_solana_network() == "devnet" else MAINNET_RPC_URL


def get_stake_program_id() -> str:
    """Return STAKE_PROGRAM_ID from env, or the devnet deployment. PDA derivation must use this program ID."""
    load_stake_hub_env()
    return (os.getenv("STAKE_PROGRAM_ID") or "").strip() or DEFAULT_PROGRAM_ID


def is_devnet() -> bool:
    """Return True if SOLANA_NETWORK is devnet."""
    return get_solana_network() == "devnet"


def explorer_cluster() -> str:
    """Cluster query value used by explorer.solana.com."""
    return "devnet" if is_devnet() else "mainnet-beta"


def explorer_tx_url(signature: str, cluster: str | None = None) -> str:
    """Return the public explorer link for a transaction signature."""
    return EXPLORER_TX_URL_TEMPLATE.format(
        signature=signature,
        cluster=cluster or explorer_cluster(),
    )


def mask_rpc_url(rpc: str) -> str:
    """Mask API key in URL if present."""
    if "api-key=" in rpc:
        return rpc.split("api-key=")[0] + "api-key=***"
    return rpc
