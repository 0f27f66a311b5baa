"""Ephemeral notification queue with optional auto-expiry."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import uuid

from loguru import logger

from core.models import Notification, Severity

DEFAULT_DURATION_MS = 3000


class NotificationQueue:
    """Append-ordered store of notifications.

    Expiring notifications get one cancellable `call_later` handle each; a
    manual dismiss cancels it so no timer outlives its notification.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        default_duration_ms: int = DEFAULT_DURATION_MS,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Create a queue.

        Args:
            loop: Event loop used for expiry timers. Defaults to the loop
                running when the first expiring notification is pushed.
            default_duration_ms: Duration used when `push` gets none.
            on_change: Called after every add or removal.
        """
        self._loop = loop
        self._default_duration_ms = max(0, int(default_duration_ms))
        self._on_change = on_change
        self._items: tuple[Notification, ...] = ()
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def items(self) -> tuple[Notification, ...]:
        """Notifications in insertion order."""
        return self._items

    def newest_first(self) -> tuple[Notification, ...]:
        return tuple(reversed(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def push(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        duration_ms: int | None = None,
    ) -> Notification:
        """Append a notification and schedule its expiry when `duration_ms > 0`.

        Raises:
            ValueError: `duration_ms` is negative.
            RuntimeError: The notification expires but no event loop was
                injected and none is running. The queue is left unchanged.
        """
        if duration_ms is None:
            duration_ms = self._default_duration_ms
        if duration_ms < 0:
            raise ValueError("duration_ms must be non-negative")
        loop = self._timer_loop() if duration_ms > 0 else None

        note = Notification(
            id=uuid.uuid4().hex, message=message, severity=severity, duration_ms=duration_ms
        )
        if loop is not None:
            self._timers[note.id] = loop.call_later(duration_ms / 1000.0, self._expire, note.id)
        self._items = self._items + (note,)
        logger.debug("Notification {} [{}]: {}", note.id, severity.value, message)
        self._changed()
        return note

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification by id. Returns False when it was already gone."""
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        return self._remove(notification_id)

    def clear(self) -> None:
        """Drop every notification and cancel all pending timers."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        if self._items:
            self._items = ()
            self._changed()

    def _timer_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as ex:
            raise RuntimeError(
                "Expiring notifications need an event loop; pass `loop` or use duration_ms=0"
            ) from ex

    def _expire(self, notification_id: str) -> None:
        self._timers.pop(notification_id, None)
        self._remove(notification_id)

    def _remove(self, notification_id: str) -> bool:
        kept = tuple(n for n in self._items if n.id != notification_id)
        if len(kept) == len(self._items):
            return False
        self._items = kept
        self._changed()
        return True

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
