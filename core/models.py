"""Core domain models for cache records, notifications and sort state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class CacheRecord:
    """A single project cache folder reported by the record source.

    `selected` is owned by the controller; sources always report it as False.
    """

    id: str
    name: str
    group_key: int
    age_days: int
    size_bytes: int
    selected: bool = False


class Severity(Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A transient user-facing message. `duration_ms == 0` means sticky."""

    id: str
    message: str
    severity: Severity
    duration_ms: int
    created_at: datetime = field(default_factory=datetime.now)


class SortKey(Enum):
    GROUP_KEY = "group_key"
    AGE = "age_days"
    SIZE = "size_bytes"
    NAME = "name"


@dataclass(frozen=True)
class SortState:
    """Current sort column and direction."""

    key: SortKey = SortKey.GROUP_KEY
    ascending: bool = True

    def toggled(self, key: SortKey) -> SortState:
        """Return the state after the user picks `key`.

        Picking the active key flips the direction; a new key starts ascending.
        """
        if key == self.key:
            return SortState(key=key, ascending=not self.ascending)
        return SortState(key=key, ascending=True)


@dataclass(frozen=True)
class GroupScope:
    """Location of every project cache for one version year."""

    group_key: int


@dataclass(frozen=True)
class RecordScope:
    """Location of a single project cache folder."""

    record_id: str


LocationScope = GroupScope | RecordScope
