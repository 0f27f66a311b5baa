"""ViewModel owning the record collection, busy flag and notifications."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum

from loguru import logger

from app.viewmodels.notification_queue import DEFAULT_DURATION_MS, NotificationQueue
from core.models import CacheRecord, LocationScope, Severity, SortKey, SortState
from core.services import selection_service as sel
from core.services.interfaces import RecordSource
from core.services.sort_service import SortService

# Change topics passed to listeners
RECORDS = "records"
BUSY = "busy"
NOTIFICATIONS = "notifications"
DELETE_STATE = "delete_state"

Listener = Callable[[str], None]


class RefreshResult(Enum):
    OK = "ok"
    BUSY = "busy"
    FAILED = "failed"


class MainVM:
    """Main application view-model.

    Mediates between a `RecordSource` and the UI. The collection is an
    immutable tuple that every mutation replaces wholesale. The busy flag
    serializes refresh and delete commits; selection and notifications stay
    writable while it is set.
    """

    def __init__(
        self,
        source: RecordSource,
        sorter: SortService | None = None,
        default_sort: list[tuple[SortKey, bool]] | None = None,
        notification_duration_ms: int = DEFAULT_DURATION_MS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Create a MainVM.

        Args:
            source: Backend providing `list_records`, `delete_record` and
                `open_location`.
            sorter: Sorting service (defaults to `SortService`).
            default_sort: List of (key, ascending) applied to every refresh.
            notification_duration_ms: Default notification lifetime.
            loop: Event loop for notification timers.
        """
        self._source = source
        self._sorter = sorter or SortService()
        self._default_sort = default_sort or []
        self._records: tuple[CacheRecord, ...] = ()
        self._busy = False
        self._listeners: list[Listener] = []
        self.sort_state = SortState()
        self.notifications = NotificationQueue(
            loop=loop,
            default_duration_ms=notification_duration_ms,
            on_change=lambda: self.emit(NOTIFICATIONS),
        )

    @property
    def source(self) -> RecordSource:
        return self._source

    @property
    def records(self) -> tuple[CacheRecord, ...]:
        """Current snapshot in source order."""
        return self._records

    @property
    def is_busy(self) -> bool:
        return self._busy

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def notify(
        self, message: str, severity: Severity = Severity.INFO, duration_ms: int | None = None
    ) -> None:
        self.notifications.push(message, severity, duration_ms)

    @contextmanager
    def busy(self) -> Iterator[None]:
        """Hold the busy flag for the duration of the block."""
        self._set_busy(True)
        try:
            yield
        finally:
            self._set_busy(False)

    async def refresh(self) -> RefreshResult:
        """Reload the whole collection from the source.

        Selection is never carried over: every record comes back unselected.
        On failure the current collection is kept.
        """
        if self._busy:
            logger.warning("Refresh requested while busy")
            self.notify("Already loading, please wait", Severity.WARN)
            return RefreshResult.BUSY

        with self.busy():
            self.notify("Refreshing projects...")
            try:
                fetched = list(await self._source.list_records())
            except Exception as ex:  # pylint: disable=broad-exception-caught
                logger.error("List records failed: {}", ex)
                self.notify(str(ex), Severity.ERROR)
                return RefreshResult.FAILED
            records = sel.set_all_selected(fetched, False)
            if self._default_sort:
                records = self._sorter.sort_multi(records, self._default_sort)
            self._set_records(records)

        logger.info("Refreshed records: {}", len(self._records))
        self.notify(f"Found {len(self._records)} projects")
        return RefreshResult.OK

    def current_view(self, sort_state: SortState | None = None) -> tuple[CacheRecord, ...]:
        """Return the collection ordered by `sort_state` (default: own state)."""
        return self._sorter.sort_state(self._records, sort_state or self.sort_state)

    def sort_by(self, key: SortKey) -> SortState:
        """Apply the header-click toggle policy for `key`."""
        self.sort_state = self.sort_state.toggled(key)
        self.emit(RECORDS)
        return self.sort_state

    # Selection

    @property
    def select_all(self) -> bool:
        return sel.is_all_selected(self._records)

    @select_all.setter
    def select_all(self, value: bool) -> None:
        self.set_all(value)

    def set_all(self, value: bool) -> None:
        self._set_records(sel.set_all_selected(self._records, value))

    def select_by_age_threshold(self, threshold_days: int) -> int:
        """Overwrite selection with `age_days >= threshold_days`. Returns selected count."""
        self._set_records(sel.select_by_age_threshold(self._records, threshold_days))
        count = len(sel.selected_records(self._records))
        logger.info("Selected {} projects older than {} days", count, threshold_days)
        return count

    def toggle(self, record_id: str) -> None:
        self._set_records(sel.toggle(self._records, record_id))

    def selected_records(self) -> tuple[CacheRecord, ...]:
        """Selected records in current view order."""
        return sel.selected_records(self.current_view())

    # Locations

    async def open_location(self, scope: LocationScope) -> bool:
        """Reveal a group or record folder. Failures become error notifications."""
        try:
            await self._source.open_location(scope)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("Open location failed for {}: {}", scope, ex)
            self.notify(str(ex), Severity.ERROR)
            return False
        return True

    def shutdown(self) -> None:
        """Cancel notification timers and detach listeners."""
        self.notifications.clear()
        self._listeners.clear()

    def _set_records(self, records: tuple[CacheRecord, ...]) -> None:
        self._records = records
        self.emit(RECORDS)

    def _set_busy(self, value: bool) -> None:
        if self._busy != value:
            self._busy = value
            self.emit(BUSY)

    def emit(self, topic: str) -> None:
        for listener in list(self._listeners):
            listener(topic)
