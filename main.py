from __future__ import annotations

import asyncio
from pathlib import Path
import sys

from PySide6 import QtAsyncio
from PySide6.QtWidgets import QApplication
from loguru import logger

from app.viewmodels.delete_vm import DeleteVM
from app.viewmodels.main_vm import MainVM
from app.views.main_window import MainWindow
from core.services.sort_service import parse_sort_keys, use_system_collation
from infrastructure.cache_source import MAXIMUM_VERSION, MINIMUM_VERSION, CollaborationCacheSource
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings


BASE_DIR = Path(__file__).parent


def build_source(settings: JsonSettings) -> CollaborationCacheSource:
    base_dir = settings.get_path("cache.base_dir")
    logger.info("Collaboration cache base: {}", base_dir)
    return CollaborationCacheSource(
        base_dir,
        min_version=settings.get_int("cache.min_version", MINIMUM_VERSION),
        max_version=settings.get_int("cache.max_version", MAXIMUM_VERSION),
        use_recycle_bin=bool(settings.get("delete.use_recycle_bin", True)),
    )


def main() -> int:
    init_logging()
    if not use_system_collation():
        logger.warning("System collation locale unavailable, names sort case-insensitively")
    settings = JsonSettings(BASE_DIR / "settings.json")

    # QtAsyncio drives this application instance
    app = QApplication(sys.argv)
    source = build_source(settings)
    windows: list[MainWindow] = []

    async def startup() -> None:
        loop = asyncio.get_running_loop()
        vm = MainVM(
            source,
            default_sort=parse_sort_keys(settings.get("sorting.defaults", [])),
            notification_duration_ms=settings.get_int("notifications.default_duration_ms", 3000),
            loop=loop,
        )
        deleter = DeleteVM(vm)
        win = MainWindow(vm=vm, delete_vm=deleter, settings=settings, loop=loop)
        windows.append(win)
        win.show()
        # Every session starts from a fresh listing
        await vm.refresh()

    QtAsyncio.run(startup(), keep_running=True, quit_qapp=True)
    logger.info("Application exited: {}", app.applicationName() or "main")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
