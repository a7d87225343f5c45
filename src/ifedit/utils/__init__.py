"""Logging and audit helpers."""
from .audit_log import ChangeRecord, get_recent_changes, log_change, setup_audit_logging
from .logging_config import perf_logger, setup_logging, timed

__all__ = [
    "ChangeRecord",
    "get_recent_changes",
    "log_change",
    "setup_audit_logging",
    "perf_logger",
    "setup_logging",
    "timed",
]
