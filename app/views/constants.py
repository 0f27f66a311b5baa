"""
UI/view constants centralized for reuse across view modules.

Column order here is the display order of the project table.
"""

from __future__ import annotations

from PySide6.QtCore import Qt

from core.models import Severity, SortKey

HEADERS: list[str] = [
    "Sel",
    "Project",
    "Version",
    "Age (days)",
    "Size",
]

COL_SEL: int = 0
COL_NAME: int = 1
COL_GROUP: int = 2
COL_AGE: int = 3
COL_SIZE: int = 4

# Header click -> sort key; the Sel column does not sort
COLUMN_SORT_KEYS: dict[int, SortKey] = {
    COL_NAME: SortKey.NAME,
    COL_GROUP: SortKey.GROUP_KEY,
    COL_AGE: SortKey.AGE,
    COL_SIZE: SortKey.SIZE,
}

# Data roles
RECORD_ID_ROLE: int = Qt.UserRole  # store record id on the name item
NOTIFICATION_ID_ROLE: int = Qt.UserRole + 1

SEVERITY_COLORS: dict[Severity, str] = {
    Severity.INFO: "#1b5e20",
    Severity.WARN: "#e65100",
    Severity.ERROR: "#b00020",
}

NOTIFICATION_PANEL_HEIGHT_PX: int = 120
DEFAULT_WINDOW_SIZE: tuple[int, int] = (900, 600)


def format_size(size_bytes: int) -> str:
    """Human readable size using binary units, e.g. `1.5 GB`."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            break
        size /= 1024
    if unit == "B":
        return f"{int(size)} B"
    return f"{size:.1f} {unit}"
