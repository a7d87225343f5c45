"""Logging configuration for ifedit.

Provides configurable logging with:
- File-based logging with rotation
- Console output
- Performance timing decorator for engine operations

Environment Variables:
    IFEDIT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: WARNING)
    IFEDIT_LOG_FILE: Path to log file (default: ~/.ifedit/ifedit.log)
    IFEDIT_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    IFEDIT_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from ifedit.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("read")
    async def read(self, path, name):
        ...
"""
import functools
import inspect
import logging
import os
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("ifedit.perf")

MAIN_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-25s | %(levelname)-7s | %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d | PERF | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level(default: str = "WARNING") -> int:
    """Get log level from environment."""
    level_str = os.environ.get("IFEDIT_LOG_LEVEL", default).upper()
    return getattr(logging, level_str, logging.WARNING)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".ifedit" / "ifedit.log"
    path_str = os.environ.get("IFEDIT_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging(level: Optional[int] = None, log_to_file: bool = True) -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (WARNING+ by default, respects IFEDIT_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)

    Args:
        level: Console level, overriding IFEDIT_LOG_LEVEL
        log_to_file: Also write the rotating log file
    """
    log_level = level if level is not None else get_log_level()

    main_format = logging.Formatter(MAIN_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    root_logger = logging.getLogger("ifedit")
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.propagate = False
    perf_logger.handlers.clear()

    if log_to_file:
        log_file = get_log_file()
        max_size_mb = int(os.environ.get("IFEDIT_LOG_MAX_SIZE", "10"))
        backup_count = int(os.environ.get("IFEDIT_LOG_BACKUPS", "5"))

        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(main_format)
        root_logger.addHandler(file_handler)

        # Performance file handler - separate file for easy analysis
        perf_handler = RotatingFileHandler(
            log_file.parent / "ifedit-perf.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        perf_handler.setLevel(logging.DEBUG)
        perf_handler.setFormatter(logging.Formatter(PERF_FORMAT, datefmt=DATE_FORMAT))
        perf_logger.addHandler(perf_handler)

        root_logger.debug(f"Logging to {log_file}")
    else:
        # No perf file, so timings go to the console at its level
        perf_logger.addHandler(console_handler)

    root_logger.debug(f"Logging initialized: level={logging.getLevelName(log_level)}")


def timed(operation: str, context_arg: str = "name"):
    """Decorator to log execution time of sync/async functions.

    Args:
        operation: Name of the operation (e.g., "read", "write")
        context_arg: Parameter whose value is logged alongside the timing

    Usage:
        @timed("write")
        async def write(self, path, name, fields):
            ...
    """
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        def context_of(args, kwargs) -> str:
            try:
                bound = signature.bind_partial(*args, **kwargs)
            except TypeError:
                return "N/A"
            return str(bound.arguments.get(context_arg, "N/A"))

        def log(context: str, start: float, error: Optional[Exception] = None):
            elapsed = (time.perf_counter() - start) * 1000  # ms
            if error is None:
                perf_logger.info(
                    f"{operation:12s} | {context:15s} | {elapsed:8.2f}ms | OK"
                )
            else:
                perf_logger.warning(
                    f"{operation:12s} | {context:15s} | {elapsed:8.2f}ms | FAIL: {error}"
                )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            context = context_of(args, kwargs)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log(context, start, e)
                raise
            log(context, start)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            context = context_of(args, kwargs)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log(context, start, e)
                raise
            log(context, start)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
