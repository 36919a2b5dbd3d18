"""
Structured logging for the stake client.

structlog with ISO timestamps, log level, and stable keys (signature, kind,
state, record, user_address). Modules call get_logger(__name__) and log a
snake_case event name with keyword context. Output goes to stderr so the CLI
can print results on stdout.

Uses only Python stdlib logging and structlog; no stake_hub imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_level = {"value": getattr(logging, LOG_LEVEL, logging.INFO)}

# json (default) or console
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

# Never rendered, whatever a caller passes
_SECRET_KEYS = frozenset({"authorizer", "keypair", "secret", "wallet_key", "private_key"})


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _redact_secrets(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    for key in _SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def _filter_level(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    level = logging.getLevelName(str(event_dict.get("level", "info")).upper())
    if isinstance(level, int) and level < _level["value"]:
        raise structlog.DropEvent
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog 'event' -> event_type; message defaults to the event name."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_structlog() -> None:
    """Configure structlog once: level, timestamp, redaction, event_type, JSON or console output."""
    renderer: Any
    if LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _filter_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _add_timestamp,
            _redact_secrets,
            _normalize_event,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def set_log_level(level: str) -> None:
    """Change the threshold at runtime; applies to loggers already bound."""
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    _level["value"] = value


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("ledger_tx_sent", signature=sig, kind="deposit")
    Output (JSON): {"event_type": "ledger_tx_sent", "signature": "...", "kind": "deposit",
    "timestamp": "...", "level": "info", "logger": "stake_hub.ledger.client"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_session(user_address: str) -> structlog.BoundLogger:
    """Logger with user_address bound for the rest of the session's events."""
    return get_logger("stake_hub").bind(user_address=user_address)
