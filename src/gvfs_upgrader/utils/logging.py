"""Rotating logger setup and activity tracing for the upgrade process."""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional


def setup_logger(
    name: str = "gvfs_upgrader",
    log_file: str = "./logs/upgrade_process.log",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 3,
    level: int = logging.INFO,
    console: bool = False,
) -> logging.Logger:
    """Setup rotating file logger with ISO 8601 timestamps.

    Args:
        name: Logger name
        log_file: Path to log file (created if doesn't exist)
        max_bytes: Max size before rotation
        backup_count: Number of rotated files to keep
        level: Logging level
        console: Also log to stderr (off by default, the console belongs
            to the operator-facing report)

    Returns:
        Configured logger instance
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers if already configured
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler = RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def new_log_file_name(
    log_dir: Path, log_type: str, now: Optional[datetime] = None
) -> Path:
    """Build a fresh log file path like ``upgrade_process_20240101_120000.log``."""
    now = now or datetime.now()
    return Path(log_dir) / f"{log_type}_{now.strftime('%Y%m%d_%H%M%S')}.log"


@contextmanager
def log_activity(logger: logging.Logger, name: str) -> Iterator[logging.Logger]:
    """Log start/stop of a named activity with its duration.

    Exceptions are logged and re-raised.
    """
    logger.debug(f"{name} start")
    started = time.monotonic()
    try:
        yield logger
    except Exception as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.error(f"{name} failed after {elapsed_ms}ms: {e}")
        raise
    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.debug(f"{name} stop ({elapsed_ms}ms)")
