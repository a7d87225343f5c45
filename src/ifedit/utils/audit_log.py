"""Audit logging for interfaces file edits.

Every write (and dry-run preview) produces one JSON line on the
`ifedit.audit` logger with the before/after field views, so changes to
network configuration can be traced and reverted by hand.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Dedicated audit logger
audit_logger = logging.getLogger("ifedit.audit")

DEFAULT_AUDIT_DIR = "~/.ifedit"


def setup_audit_logging(log_dir: Optional[str] = None) -> Path:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to ~/.ifedit/

    Returns:
        Path of the audit log file
    """
    log_dir = os.path.expanduser(log_dir or DEFAULT_AUDIT_DIR)
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    audit_file = Path(log_dir) / "audit.log"

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    # One JSON document per line
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)

    # Don't propagate to the ifedit console logger
    audit_logger.propagate = False

    return audit_file


@dataclass
class ChangeRecord:
    """Record of an interfaces file edit."""
    timestamp: str
    path: str
    interface: str
    operation: str  # write, preview
    dry_run: bool
    success: bool
    parameters: dict
    before_state: Optional[dict] = None
    after_state: Optional[dict] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeRecord":
        """Parse from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


def log_change(
    path: str,
    interface: str,
    operation: str,
    parameters: dict,
    success: bool,
    dry_run: bool = False,
    before_state: Optional[dict] = None,
    after_state: Optional[dict] = None,
    error: Optional[str] = None,
) -> ChangeRecord:
    """Log an interfaces file edit.

    Returns:
        The ChangeRecord that was logged
    """
    record = ChangeRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=str(path),
        interface=interface,
        operation=operation,
        dry_run=dry_run,
        success=success,
        parameters=parameters,
        before_state=before_state,
        after_state=after_state,
        error=error,
    )

    audit_logger.info(record.to_json())

    return record


def get_recent_changes(
    log_file: Optional[str] = None,
    interface: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent changes from the audit log.

    Args:
        log_file: Path to audit log. Defaults to ~/.ifedit/audit.log
        interface: Filter by interface name
        limit: Maximum number of records to return

    Returns:
        List of ChangeRecords, most recent first
    """
    if log_file is None:
        log_file = os.path.join(os.path.expanduser(DEFAULT_AUDIT_DIR), "audit.log")

    if not os.path.exists(log_file):
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if interface and record.interface != interface:
                continue
            records.append(record)

    return list(reversed(records[-limit:]))
