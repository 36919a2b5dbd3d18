"""
Test that hub_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from hub_logging and use the logger."""
    from stake_hub.hub_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_session_logger():
    from stake_hub.hub_logging import bind_session

    logger = bind_session("9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka")
    logger.info("session_test", record="pda")


def test_secrets_are_redacted():
    from stake_hub.hub_logging.logger import _redact_secrets

    event = _redact_secrets(None, "info", {"event": "x", "wallet_key": "abc", "signature": "sig"})
    assert event["wallet_key"] == "***"
    assert event["signature"] == "sig"


def test_level_threshold_drops_events():
    import pytest
    import structlog

    from stake_hub.hub_logging import logger as hub_logger
    from stake_hub.hub_logging import set_log_level

    previous = hub_logger._level["value"]
    try:
        set_log_level("WARNING")
        with pytest.raises(structlog.DropEvent):
            hub_logger._filter_level(None, "info", {"level": "info"})
        assert hub_logger._filter_level(None, "error", {"level": "error"}) == {"level": "error"}
        with pytest.raises(ValueError):
            set_log_level("chatty")
    finally:
        hub_logger._level["value"] = previous
