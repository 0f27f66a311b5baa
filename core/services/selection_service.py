"""Selection helpers over immutable record snapshots.

Every function returns a new tuple; the input snapshot is never edited in
place. Bulk selections overwrite the previous state of every record rather
than adding to it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace

from core.models import CacheRecord


def is_all_selected(records: Iterable[CacheRecord]) -> bool:
    """True iff every record is selected (vacuously True when empty)."""
    return all(r.selected for r in records)


def set_all_selected(records: Iterable[CacheRecord], value: bool) -> tuple[CacheRecord, ...]:
    """Set every record's selection flag to `value`."""
    return tuple(r if r.selected == value else replace(r, selected=value) for r in records)


def select_where(
    records: Iterable[CacheRecord], predicate: Callable[[CacheRecord], bool]
) -> tuple[CacheRecord, ...]:
    """Select records matching `predicate` and deselect all others."""
    out: list[CacheRecord] = []
    for r in records:
        wanted = bool(predicate(r))
        out.append(r if r.selected == wanted else replace(r, selected=wanted))
    return tuple(out)


def select_by_age_threshold(
    records: Iterable[CacheRecord], threshold_days: int
) -> tuple[CacheRecord, ...]:
    """Select records at least `threshold_days` old; younger ones are deselected."""
    return select_where(records, lambda r: r.age_days >= threshold_days)


def toggle(records: Iterable[CacheRecord], record_id: str) -> tuple[CacheRecord, ...]:
    """Flip the selection of `record_id`. Unknown ids leave the snapshot as is."""
    return tuple(
        replace(r, selected=not r.selected) if r.id == record_id else r for r in records
    )


def selected_records(records: Iterable[CacheRecord]) -> tuple[CacheRecord, ...]:
    return tuple(r for r in records if r.selected)


def selection_summary(records: Iterable[CacheRecord]) -> tuple[int, int]:
    """Return (selected count, selected bytes)."""
    chosen = selected_records(records)
    return len(chosen), sum(r.size_bytes for r in chosen)
