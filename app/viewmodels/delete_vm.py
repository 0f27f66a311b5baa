"""Two-phase deletion workflow: stage, confirm, concurrent commit, refresh."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable, Iterable
from enum import Enum

from loguru import logger

from app.viewmodels.main_vm import DELETE_STATE, MainVM
from core.models import CacheRecord, Severity
from core.services.interfaces import (
    DeleteOutcome,
    DeletePlanGroupSummary,
    DeleteResult,
    StagedDeletion,
)


class DeleteState(Enum):
    IDLE = "idle"
    STAGED = "staged"
    CONFIRMING = "confirming"
    COMMITTING = "committing"


def plan_delete(
    all_records: Iterable[CacheRecord], staged: Iterable[CacheRecord]
) -> StagedDeletion:
    """Compute the staged snapshot with per-group summaries."""
    staged = tuple(staged)
    totals = Counter(r.group_key for r in all_records)
    chosen = Counter(r.group_key for r in staged)
    summaries = tuple(
        DeletePlanGroupSummary(
            group_key=group_key,
            selected_count=chosen.get(group_key, 0),
            total_count=total,
            is_full_delete=(total > 0 and chosen.get(group_key, 0) == total),
        )
        for group_key, total in sorted(totals.items())
    )
    return StagedDeletion(records=staged, group_summaries=summaries)


class DeleteVM:
    """Coordinates confirmation-gated batch deletes.

    Each commit fans out one delete request per staged record and waits for
    all of them; a failed request is reported on its own and never cancels
    the others. The source is re-listed once the batch settles, so records
    whose delete failed reappear from the refresh.
    """

    def __init__(
        self,
        vm: MainVM,
        confirm_handler: Callable[[StagedDeletion], None] | None = None,
    ) -> None:
        """Initialize with the main view-model.

        Args:
            vm: Main view-model owning records, busy flag and notifications.
            confirm_handler: Called with the staged set to ask the user for
                confirmation; it must later call `confirm()` or `cancel()`.
        """
        self._vm = vm
        self.confirm_handler = confirm_handler
        self._state = DeleteState.IDLE
        self._staged: StagedDeletion | None = None

    @property
    def state(self) -> DeleteState:
        return self._state

    @property
    def staged(self) -> StagedDeletion | None:
        return self._staged

    def start_delete(self) -> StagedDeletion | None:
        """Snapshot the current selection and request confirmation."""
        if self._state is not DeleteState.IDLE:
            self._vm.notify("A deletion is already pending", Severity.WARN)
            return None

        chosen = self._vm.selected_records()
        if not chosen:
            self._vm.notify("No projects selected", Severity.WARN)
            return None

        self._staged = plan_delete(self._vm.records, chosen)
        self._set_state(DeleteState.STAGED)
        logger.info(
            "Staged {} projects ({} bytes) for deletion",
            len(self._staged.records),
            self._staged.total_bytes,
        )

        self._set_state(DeleteState.CONFIRMING)
        if self.confirm_handler is not None:
            self.confirm_handler(self._staged)
        return self._staged

    def cancel(self) -> None:
        """Abort a pending confirmation without touching the source."""
        if self._state is not DeleteState.CONFIRMING:
            return
        logger.info("Deletion cancelled by user")
        self._staged = None
        self._set_state(DeleteState.IDLE)

    async def confirm(self) -> DeleteResult | None:
        """Commit the staged set.

        Returns None when nothing is pending or the controller is busy; in the
        busy case the confirmation stays pending.
        """
        if self._state is not DeleteState.CONFIRMING or self._staged is None:
            return None
        if self._vm.is_busy:
            logger.warning("Delete confirmation rejected: busy")
            self._vm.notify("Please wait, an operation is in progress", Severity.WARN)
            return None

        staged = self._staged
        self._set_state(DeleteState.COMMITTING)
        with self._vm.busy():
            self._vm.notify(f"Deleting {len(staged.records)} projects...")
            outcomes = await asyncio.gather(*(self._delete_one(r) for r in staged.records))

        result = DeleteResult(
            success_ids=[o.record_id for o in outcomes if o.ok],
            failed=[(o.record_id, o.error or "") for o in outcomes if not o.ok],
        )
        logger.info(
            "Delete finished: {} success, {} failed", len(result.success_ids), len(result.failed)
        )
        if result.failed:
            self._vm.notify(
                f"Deletion complete: {len(result.success_ids)} deleted, "
                f"{len(result.failed)} failed"
            )
        else:
            self._vm.notify(f"Deletion complete: {len(result.success_ids)} deleted")

        self._staged = None
        self._set_state(DeleteState.IDLE)
        await self._vm.refresh()
        return result

    async def _delete_one(self, record: CacheRecord) -> DeleteOutcome:
        try:
            await self._vm.source.delete_record(record.id)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("Delete failed for {}: {}", record.id, ex)
            self._vm.notify(str(ex), Severity.ERROR)
            return DeleteOutcome(record_id=record.id, error=str(ex))
        logger.info("Deleted {}", record.id)
        return DeleteOutcome(record_id=record.id)

    def _set_state(self, state: DeleteState) -> None:
        self._state = state
        self._vm.emit(DELETE_STATE)
