"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULTS: dict[str, Any] = {
    "cache": {
        "base_dir": "%LOCALAPPDATA%/Autodesk/Revit",
        "min_version": 2018,
        "max_version": 2038,
    },
    "notifications": {"default_duration_ms": 3000},
    "selection": {"default_age_threshold_days": 30},
    "delete": {"use_recycle_bin": True, "confirm_group_full_delete": True},
    "sorting": {"defaults": [{"field": "group_key", "asc": True}]},
}


def _lookup(node: Any, parts: list[str]) -> tuple[bool, Any]:
    for part in parts:
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return False, None
    return True, node


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access.

    Keys missing from the file fall back to `DEFAULTS`.
    """

    def __init__(self, settings_path: str | Path, defaults: dict[str, Any] | None = None) -> None:
        self._path = Path(settings_path)
        self._defaults = DEFAULTS if defaults is None else defaults
        self._data: dict[str, Any] = {}
        if not self._path.exists():
            logger.warning("settings.json not found: {}, using defaults", self._path)
            return
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present anywhere."""
        parts = key.split(".")
        for source in (self._data, self._defaults):
            found, value = _lookup(source, parts)
            if found:
                return value
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError):
            logger.warning("Invalid integer setting {}, using {}", key, default)
            return default

    def get_path(self, key: str) -> Path:
        """Return a path setting with environment variables expanded."""
        raw = str(self.get(key, ""))
        return Path(os.path.expanduser(os.path.expandvars(raw)))
