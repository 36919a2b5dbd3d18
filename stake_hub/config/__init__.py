"""
Configuration management for Stake Hub.

Loads settings from environment variables and an optional .env file. Exposes a
single source of truth for RPC endpoint, program id, and timing.
"""

from stake_hub.config.settings import StakeHubSettings, get_settings  # noqa: F401

__all__ = ["StakeHubSettings", "get_settings"]
