"""
Structured logging for Stake Hub.

Use get_logger() in all modules; bind_session() once a wallet is connected.
"""

from stake_hub.hub_logging.logger import bind_session, get_logger, set_log_level

__all__ = ["bind_session", "get_logger", "set_log_level"]
