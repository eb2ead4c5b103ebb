"""
Logging configuration for lazy-record.

Library modules only call ``logging.getLogger(__name__)``; applications
(and the ``lazy-record`` CLI) call :func:`initialize_logging` to attach
handlers to the root logger:
- Log level from LOG_LEVEL / DEBUG environment variables
- Console and rotating file handlers
- Log retention cleanup
- Performance monitoring of loader calls
"""

from datetime import datetime
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import time
from typing import Any

# -------------------- Configuration --------------------


# Log directory
LOG_DIR = Path.home() / ".cache" / "lazy-record" / "logs"

# Log retention
LOG_RETENTION_DAYS = 3

# Log format strings
CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# Date format for logs
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# -------------------- Utility Functions --------------------


def get_log_level() -> int:
    """
    Get the current log level from environment configuration.

    Checks LOG_LEVEL environment variable first, then DEBUG flag.

    Returns:
        Logging level constant (logging.DEBUG, logging.INFO, etc.)
    """
    level_str = os.getenv("LOG_LEVEL", "").upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str in level_map:
        return level_map[level_str]

    # Fall back to DEBUG env var
    if os.getenv("DEBUG", "").lower() in ("true", "1", "yes"):
        return logging.DEBUG

    return logging.INFO


def get_log_file_path() -> Path:
    """
    Get the path to the current log file.

    Creates log directory if it doesn't exist.

    Returns:
        Path to the log file for today
    """
    log_dir = LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    today = datetime.now().strftime("%Y-%m-%d")
    return log_dir / f"lazy-record-{today}.log"


def cleanup_old_logs() -> None:
    """Remove log files older than LOG_RETENTION_DAYS."""
    log_dir = LOG_DIR

    if not log_dir.exists():
        return

    try:
        cutoff = time.time() - (LOG_RETENTION_DAYS * 24 * 60 * 60)

        for log_file in log_dir.glob("lazy-record-*.log"):
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                logging.getLogger(__name__).info(f"Removed old log file: {log_file}")

    except OSError as e:
        logging.getLogger(__name__).warning(f"Failed to cleanup old logs: {e}")


# -------------------- Setup Functions --------------------


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        get_log_file_path(),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    return handler


def initialize_logging(level: int | None = None, file: bool = False) -> None:
    """
    Initialize logging for an application using lazy records.

    Sets up the root logger and performs initial cleanup.
    Should be called once at application startup.

    Args:
        level: Log level (defaults to get_log_level())
        file: Also write to the rotating log file
    """
    level = level or get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_logger.addHandler(_console_handler(level))

    if file:
        root_logger.addHandler(_file_handler(level))

    cleanup_old_logs()

    logging.getLogger(__name__).debug(
        f"Logging initialized. Level: {logging.getLevelName(level)}"
    )


# -------------------- Performance Monitoring --------------------


class PerformanceMonitor:
    """
    Context manager for monitoring operation performance.

    Logs execution time and optional metadata. The measured time stays
    available as ``elapsed_ms`` after the block exits, also when it raised.

    Example:
        >>> with PerformanceMonitor(logger, "Loader todo"):
        ...     result = await load()
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation_name: str,
        log_level: int = logging.DEBUG,
        **metadata: Any,
    ) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.metadata = metadata
        self.start_time: float | None = None
        self.elapsed_ms: float = 0

    def __enter__(self) -> "PerformanceMonitor":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return

        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        status = "completed" if exc_type is None else "failed"
        msg = f"{self.operation_name} {status} in {self.elapsed_ms:.2f}ms"

        if self.metadata:
            metadata_str = ", ".join(f"{k}={v}" for k, v in self.metadata.items())
            msg = f"{msg} ({metadata_str})"

        self.logger.log(self.log_level, msg)
