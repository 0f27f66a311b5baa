"""Logging initialization utilities using loguru."""

from __future__ import annotations

import os
from pathlib import Path
import subprocess

from loguru import logger

APP_DIR_NAME = "CollabCacheManager"


def _local_app_data() -> Path:
    if os.name == "nt":
        return Path(os.path.expandvars("%LOCALAPPDATA%"))
    return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))


def get_log_directory() -> str:
    """Get the main log directory path."""
    return str(_local_app_data() / APP_DIR_NAME / "logs")


def init_logging(log_dir: str | None = None, level: str = "INFO") -> None:
    """Initialize rotating file logging under the given directory."""
    if log_dir is None:
        log_dir = get_log_directory()
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )


def find_latest_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest log file in the specified directory."""
    if log_dir is None:
        log_dir = get_log_directory()

    try:
        log_path = Path(log_dir)
        if not log_path.exists():
            return None

        log_files = list(log_path.glob("app_*.log"))
        if not log_files:
            return None

        return max(log_files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None


def open_in_file_manager(path: str) -> None:
    """Open a file or directory with the platform default handler.

    Raises:
        OSError: When the path cannot be opened.
    """
    if os.name == "nt":  # Windows
        os.startfile(path)  # type: ignore[attr-defined]
        return
    try:
        subprocess.run(["xdg-open", path], check=True)
    except subprocess.CalledProcessError as ex:
        raise OSError(f"xdg-open failed for {path}: exit {ex.returncode}") from ex


def open_latest_log() -> bool:
    """Open the latest log file in the default application."""
    log_file = find_latest_log_file()
    if log_file is None:
        return False
    try:
        open_in_file_manager(str(log_file))
    except OSError as ex:
        logger.error("Open latest log failed: {}", ex)
        return False
    return True


def open_log_directory() -> bool:
    """Open the log directory in the file explorer."""
    try:
        open_in_file_manager(get_log_directory())
    except OSError as ex:
        logger.error("Open log directory failed: {}", ex)
        return False
    return True
