"""Sorting service for `CacheRecord` snapshots.

The service orders records by one or more keys with per-key
ascending/descending direction. It never mutates the input; ties keep their
prior relative order in both directions.
"""

from __future__ import annotations

from collections.abc import Iterable
import locale
from typing import Any

from core.models import CacheRecord, SortKey, SortState


def _sort_value(record: CacheRecord, key: SortKey) -> Any:
    if key is SortKey.NAME:
        # Case-insensitive first so the "C" collation still interleaves cases
        return (locale.strxfrm(record.name.casefold()), locale.strxfrm(record.name))
    return getattr(record, key.value)


class SortService:
    """Provides sorting utilities for record snapshots."""

    def sort(
        self, records: Iterable[CacheRecord], key: SortKey, ascending: bool = True
    ) -> tuple[CacheRecord, ...]:
        """Return `records` ordered by a single `key`."""
        return tuple(
            sorted(records, key=lambda r: _sort_value(r, key), reverse=not ascending)
        )

    def sort_state(
        self, records: Iterable[CacheRecord], state: SortState
    ) -> tuple[CacheRecord, ...]:
        """Return `records` ordered by a `SortState`."""
        return self.sort(records, state.key, state.ascending)

    def sort_multi(
        self, records: Iterable[CacheRecord], sort_keys: list[tuple[SortKey, bool]]
    ) -> tuple[CacheRecord, ...]:
        """Sort by several keys, primary key first.

        Args:
            records: Records to order.
            sort_keys: List of tuples (key, ascending).
        """
        result = tuple(records)
        # Stable sorts applied from the least significant key up
        for key, ascending in reversed(sort_keys):
            result = self.sort(result, key, ascending)
        return result


def use_system_collation() -> bool:
    """Switch `LC_COLLATE` to the user's locale. Returns False if unavailable."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        return False
    return True


def parse_sort_keys(raw: Any) -> list[tuple[SortKey, bool]]:
    """Parse settings like `[{"field": "age_days", "asc": false}, ...]`.

    Unknown fields are skipped.
    """
    result: list[tuple[SortKey, bool]] = []
    if not isinstance(raw, list):
        return result
    for item in raw:
        if isinstance(item, dict) and "field" in item:
            try:
                key = SortKey(str(item.get("field")))
            except ValueError:
                continue
            result.append((key, bool(item.get("asc", True))))
    return result
