"""
Single-slot, self-expiring user notifications.

At most one message is visible. post() replaces the current message and
schedules its expiry ttl seconds after creation on the running event loop; the
previous expiry handle is cancelled so it cannot clear the newer message.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable

from stake_hub.config.settings import DEFAULT_NOTIFICATION_TTL_SEC
from stake_hub.hub_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    message: str
    created_at: float = field(default_factory=time.time)


class NotificationQueue:
    def __init__(
        self,
        ttl_sec: float = DEFAULT_NOTIFICATION_TTL_SEC,
        on_change: Callable[[Notification | None], None] | None = None,
    ) -> None:
        if ttl_sec <= 0:
            raise ValueError("ttl_sec must be positive")
        self._ttl = ttl_sec
        self._on_change = on_change
        self._current: Notification | None = None
        self._expiry: asyncio.TimerHandle | None = None

    @property
    def ttl_sec(self) -> float:
        return self._ttl

    @property
    def current(self) -> Notification | None:
        return self._current

    def post(self, message: str) -> Notification:
        """Show `message`, replacing any current notification. Requires a running loop."""
        loop = asyncio.get_running_loop()
        self._cancel_expiry()
        note = Notification(message=message)
        self._current = note
        self._expiry = loop.call_later(self._ttl, self._expire, note)
        logger.debug("notification_posted", message=message, ttl_sec=self._ttl)
        self._emit()
        return note

    def clear(self) -> None:
        self._cancel_expiry()
        if self._current is not None:
            self._current = None
            self._emit()

    def _cancel_expiry(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

    def _expire(self, note: Notification) -> None:
        # stale callback from a replaced notification
        if self._current is not note:
            return
        self._current = None
        self._expiry = None
        logger.debug("notification_expired", message=note.message)
        self._emit()

    def _emit(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._current)
        except Exception as e:
            logger.exception("notification_listener_failed", error=str(e))
