"""
Application settings for the stake client.

Fields read the environment in default_factory so a bare StakeHubSettings()
reflects .env; tests pass explicit values instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from stake_hub.config.env import (
    explorer_cluster,
    get_solana_rpc_url,
    get_stake_program_id,
    load_stake_hub_env,
)

DEFAULT_COMMITMENT = "confirmed"
DEFAULT_CONFIRM_TIMEOUT_SEC = 30.0
DEFAULT_CONFIRM_POLL_INTERVAL_SEC = 1.0
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_NOTIFICATION_TTL_SEC = 3.0
_COMMITMENTS = ("processed", "confirmed", "finalized")


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class StakeHubSettings:
    """Config for the stake client (env or explicit)."""

    rpc_url: str = field(default_factory=get_solana_rpc_url)
    program_id: str = field(default_factory=get_stake_program_id)
    explorer_cluster: str = field(default_factory=explorer_cluster)
    commitment: str = field(default_factory=lambda: (os.getenv("SOLANA_COMMITMENT") or DEFAULT_COMMITMENT).strip().lower())
    confirm_timeout_sec: float = field(default_factory=lambda: _env_float("CONFIRM_TIMEOUT_SEC", DEFAULT_CONFIRM_TIMEOUT_SEC))
    confirm_poll_interval_sec: float = DEFAULT_CONFIRM_POLL_INTERVAL_SEC
    request_timeout_sec: float = field(default_factory=lambda: _env_float("REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC))
    history_limit: int = DEFAULT_HISTORY_LIMIT
    notification_ttl_sec: float = DEFAULT_NOTIFICATION_TTL_SEC
    wallet_key: str = field(default_factory=lambda: (os.getenv("STAKE_HUB_WALLET_KEY") or "").strip())
    wallet_key_path: str = field(default_factory=lambda: (os.getenv("STAKE_HUB_WALLET_PATH") or "").strip())

    def __post_init__(self) -> None:
        if self.commitment not in _COMMITMENTS:
            self.commitment = DEFAULT_COMMITMENT
        if self.confirm_timeout_sec <= 0:
            self.confirm_timeout_sec = DEFAULT_CONFIRM_TIMEOUT_SEC
        if self.confirm_poll_interval_sec <= 0:
            self.confirm_poll_interval_sec = DEFAULT_CONFIRM_POLL_INTERVAL_SEC
        if self.request_timeout_sec <= 0:
            self.request_timeout_sec = DEFAULT_REQUEST_TIMEOUT_SEC
        if not 1 <= self.history_limit <= DEFAULT_HISTORY_LIMIT:
            self.history_limit = DEFAULT_HISTORY_LIMIT
        if self.notification_ttl_sec <= 0:
            self.notification_ttl_sec = DEFAULT_NOTIFICATION_TTL_SEC


@lru_cache(maxsize=1)
def get_settings() -> StakeHubSettings:
    """Return the process-wide settings, loading .env on first use."""
    load_stake_hub_env()
    return StakeHubSettings()
