"""Core service interfaces and shared data structures.

This module defines the record source contract consumed by the view-models
and the simple dataclasses that represent staged deletes and their results.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from core.models import CacheRecord, LocationScope


class SourceError(Exception):
    """Failure reported by a record source. `str(err)` is shown to the user."""


class RecordSource(Protocol):
    """Backend that lists, deletes and reveals project cache folders."""

    async def list_records(self) -> Sequence[CacheRecord]:
        """Return every record currently present; `selected` is always False."""
        ...

    async def delete_record(self, record_id: str) -> None:
        """Delete the record with `record_id` or raise on failure."""
        ...

    async def open_location(self, scope: LocationScope) -> None:
        """Reveal a group or record folder in the platform file manager."""
        ...


@dataclass(frozen=True)
class DeletePlanGroupSummary:
    """Summary of delete intent for a single group.

    Attributes:
        group_key: Identifier of the group (version year).
        selected_count: Number of staged records in the group.
        total_count: Total records in the group.
        is_full_delete: Whether all records in the group are staged.
    """

    group_key: int
    selected_count: int
    total_count: int
    is_full_delete: bool


@dataclass(frozen=True)
class StagedDeletion:
    """Immutable snapshot of the records chosen for deletion.

    Attributes:
        records: Records captured at stage time, in view order.
        group_summaries: Group-level summaries for the confirmation UI.
    """

    records: tuple[CacheRecord, ...]
    group_summaries: tuple[DeletePlanGroupSummary, ...]

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.records)


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of a single delete request; `error` is None on success."""

    record_id: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DeleteResult:
    """Outcome of a delete commit.

    Attributes:
        success_ids: Record ids deleted successfully.
        failed: Tuples of (record_id, reason) for failures.
    """

    success_ids: list[str]
    failed: list[tuple[str, str]]
