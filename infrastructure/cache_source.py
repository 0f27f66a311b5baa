"""Filesystem record source for Revit collaboration caches.

Scans `<base>/Autodesk Revit <year>/CollaborationCache/<user>/<project>` for
every supported version year and reports one record per project folder.
Blocking filesystem work runs in worker threads so the event loop stays
responsive while folders are walked or removed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import os
from pathlib import Path
import shutil
import threading
import time

from loguru import logger
from send2trash import send2trash

from core.models import CacheRecord, GroupScope, LocationScope, RecordScope
from core.services.interfaces import SourceError
from infrastructure.logging import open_in_file_manager

MINIMUM_VERSION = 2018
MAXIMUM_VERSION = 2038
SECONDS_PER_DAY = 86400


def version_cache_dir(base_dir: Path, version: int) -> Path:
    """Return `<base>/Autodesk Revit <version>/CollaborationCache`."""
    return base_dir / f"Autodesk Revit {version}" / "CollaborationCache"


def measure_folder(folder: Path, now: float) -> tuple[int, int]:
    """Return (total file bytes, whole days since the newest file was modified).

    Unreadable entries are skipped; a folder without files is 0 days old.
    """
    total_size = 0
    youngest: float | None = None
    for root, _dirs, files in os.walk(folder):
        for name in files:
            try:
                st = os.stat(os.path.join(root, name), follow_symlinks=False)
            except OSError:
                continue
            total_size += st.st_size
            if youngest is None or st.st_mtime > youngest:
                youngest = st.st_mtime

    days_old = 0
    if youngest is not None and now >= youngest:
        days_old = int((now - youngest) // SECONDS_PER_DAY)
    return total_size, days_old


def _is_dir(path: Path) -> bool:
    """`Path.is_dir` that treats unreadable entries as absent."""
    try:
        return path.is_dir()
    except OSError as ex:
        logger.warning("Cannot stat {}: {}", path, ex)
        return False


class CollaborationCacheSource:
    """Lists, deletes and reveals project cache folders on disk.

    Record ids are full folder paths. The id -> path cache is rebuilt on every
    listing; deletes and record-scoped opens only accept ids from it.
    """

    def __init__(
        self,
        base_dir: str | Path,
        min_version: int = MINIMUM_VERSION,
        max_version: int = MAXIMUM_VERSION,
        use_recycle_bin: bool = True,
        opener: Callable[[str], None] = open_in_file_manager,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._min_version = min_version
        self._max_version = max_version
        self._use_recycle_bin = use_recycle_bin
        self._opener = opener
        self._clock = clock
        self._cache: dict[str, Path] = {}
        self._lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def list_records(self) -> list[CacheRecord]:
        return await asyncio.to_thread(self.scan)

    async def delete_record(self, record_id: str) -> None:
        await asyncio.to_thread(self.delete, record_id)

    async def open_location(self, scope: LocationScope) -> None:
        await asyncio.to_thread(self.open, scope)

    def scan(self) -> list[CacheRecord]:
        """Walk every version folder and build the record list."""
        with self._lock:
            self._cache.clear()

        now = self._clock()
        records: list[CacheRecord] = []
        for version in range(self._min_version, self._max_version + 1):
            vers_path = version_cache_dir(self._base_dir, version)
            if not _is_dir(vers_path):
                continue
            try:
                user_folders = sorted(vers_path.iterdir())
            except OSError as ex:
                logger.warning("Cannot read {}: {}", vers_path, ex)
                continue

            for user_folder in user_folders:
                if not _is_dir(user_folder):
                    continue
                try:
                    project_folders = sorted(user_folder.iterdir())
                except OSError as ex:
                    logger.warning("Cannot read {}: {}", user_folder, ex)
                    continue

                for project_folder in project_folders:
                    if not _is_dir(project_folder):
                        continue
                    size, days = measure_folder(project_folder, now)
                    path_id = str(project_folder)
                    records.append(
                        CacheRecord(
                            id=path_id,
                            name=project_folder.name,
                            group_key=version,
                            age_days=days,
                            size_bytes=size,
                        )
                    )
                    with self._lock:
                        self._cache[path_id] = project_folder

        logger.info("Scanned {}: {} projects", self._base_dir, len(records))
        return records

    def delete(self, record_id: str) -> None:
        with self._lock:
            path = self._cache.pop(record_id, None)
        if path is None:
            raise SourceError(f"Project with ID '{record_id}' not found in cache.")

        try:
            if self._use_recycle_bin:
                send2trash(str(path))
            else:
                shutil.rmtree(path)
        except OSError as ex:
            message = f"Failed to delete directory {path}: {ex}"
            logger.error("{}", message)
            raise SourceError(message) from ex
        logger.info("Successfully deleted directory: {}", path)

    def open(self, scope: LocationScope) -> None:
        if isinstance(scope, RecordScope):
            with self._lock:
                path = self._cache.get(scope.record_id)
            if path is None:
                raise SourceError("Project not found in cache")
        elif isinstance(scope, GroupScope):
            path = version_cache_dir(self._base_dir, scope.group_key)
        else:
            raise SourceError(f"Unsupported location: {scope!r}")

        try:
            self._opener(str(path))
        except OSError as ex:
            raise SourceError(f"Failed to open {path}: {ex}") from ex
