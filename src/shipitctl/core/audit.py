"""Audit logging for dispatch runs.

Provides:
- JSON-lines audit log, one event per host
- Session IDs tying a run's events together
- Automatic log rotation

Audit failures never abort a run; they are reported at debug level.
"""

import fcntl
import json
import os
import pwd
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Generator, Optional

from shipitctl.core.config import DEFAULT_AUDIT_LOG
from shipitctl.core.output import console


DEFAULT_MAX_SIZE_MB = 10
DEFAULT_BACKUP_COUNT = 5


class AuditEventType(Enum):
    """Types of auditable events."""
    SESSION_START = "session.start"
    SESSION_END = "session.end"
    HOST_DISPATCH = "host.dispatch"


class AuditResult(Enum):
    """Result of an audited operation."""
    SUCCESS = "success"
    FAILURE = "failure"
    DRY_RUN = "dry_run"
    PARTIAL = "partial"


def _current_username() -> str:
    try:
        return pwd.getpwuid(os.getuid()).pw_name
    except KeyError:
        return str(os.getuid())


@dataclass
class AuditEvent:
    """Represents a single audit event."""
    event_type: AuditEventType
    result: AuditResult
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Actor information
    actor_uid: int = field(default_factory=os.getuid)
    actor_username: str = field(default_factory=_current_username)

    # Target information
    hostname: Optional[str] = None
    port: Optional[str] = None

    # Operation details
    operation: Optional[str] = None
    parameters: dict[str, Any] = field(default_factory=dict)
    return_code: Optional[int] = None
    message: Optional[str] = None

    session_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "result": self.result.value,
            "timestamp": self.timestamp.isoformat(),
            "actor": {
                "uid": self.actor_uid,
                "username": self.actor_username,
            },
            "target": {
                "hostname": self.hostname,
                "port": self.port,
            },
            "operation": self.operation,
            "parameters": self.parameters,
            "return_code": self.return_code,
            "message": self.message,
            "session_id": self.session_id,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class AuditLogger:
    """Audit logger for dispatch runs.

    Features:
    - Append-only JSON log file
    - Writes under an exclusive file lock
    - Automatic log rotation
    """

    def __init__(
        self,
        log_path: Optional[Path] = None,
        max_size_mb: int = DEFAULT_MAX_SIZE_MB,
        backup_count: int = DEFAULT_BACKUP_COUNT,
        enabled: bool = True,
    ) -> None:
        """Initialize audit logger.

        Args:
            log_path: Path to audit log file (``~`` is expanded)
            max_size_mb: Maximum log file size before rotation
            backup_count: Number of backup files to keep
            enabled: Whether logging is enabled
        """
        self.log_path = (log_path or DEFAULT_AUDIT_LOG).expanduser()
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.backup_count = backup_count
        self.enabled = enabled
        self.session_id = str(uuid.uuid4())

    def _ensure_log_directory(self) -> bool:
        """Create log directory with private permissions.

        Returns:
            True if successful, False otherwise
        """
        try:
            self.log_path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)
            if not self.log_path.exists():
                self.log_path.touch(mode=0o640)
            return True
        except OSError as e:
            console.debug(f"Cannot create audit log directory: {e}")
            return False

    def log(self, event: AuditEvent) -> None:
        """Log an audit event.

        Args:
            event: Event to log
        """
        if not self.enabled:
            return

        event.session_id = self.session_id
        log_line = event.to_json() + "\n"

        if not self._ensure_log_directory():
            return

        try:
            with self._atomic_append() as f:
                f.write(log_line)
        except OSError as e:
            console.debug(f"Failed to write audit log: {e}")
            return

        self._rotate_if_needed()

    @contextmanager
    def _atomic_append(self) -> Generator:
        """Context manager for append with file locking."""
        fd = os.open(
            self.log_path,
            os.O_WRONLY | os.O_APPEND | os.O_CREAT,
            0o640,
        )
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError:
            os.close(fd)
            raise
        with os.fdopen(fd, "a") as f:
            yield f
            f.flush()

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        try:
            if self.log_path.stat().st_size > self.max_size_bytes:
                self._rotate_logs()
        except OSError as e:
            console.debug(f"Audit log rotation failed: {e}")

    def _rotate_logs(self) -> None:
        """Rotate log files: audit.log -> audit.log.1 -> ... -> audit.log.N."""
        oldest = self._backup_path(self.backup_count)
        if oldest.exists():
            oldest.unlink()

        for i in range(self.backup_count - 1, 0, -1):
            src = self._backup_path(i)
            if src.exists():
                src.rename(self._backup_path(i + 1))

        self.log_path.rename(self._backup_path(1))
        self.log_path.touch(mode=0o640)

    def _backup_path(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    # Convenience methods
    def log_session_start(self, operation: str, servers_file: Path) -> None:
        """Log the start of a dispatch run."""
        self.log(AuditEvent(
            event_type=AuditEventType.SESSION_START,
            result=AuditResult.SUCCESS,
            operation=operation,
            parameters={"servers_file": str(servers_file)},
        ))

    def log_host(
        self,
        operation: str,
        hostname: str,
        port: str,
        return_code: int,
        dry_run: bool = False,
    ) -> None:
        """Log the outcome of one host."""
        if dry_run:
            result = AuditResult.DRY_RUN
        elif return_code == 0:
            result = AuditResult.SUCCESS
        else:
            result = AuditResult.FAILURE
        self.log(AuditEvent(
            event_type=AuditEventType.HOST_DISPATCH,
            result=result,
            hostname=hostname,
            port=port,
            operation=operation,
            return_code=return_code,
        ))

    def log_session_end(self, operation: str, succeeded: int, failed: int) -> None:
        """Log the end of a dispatch run."""
        if failed == 0:
            result = AuditResult.SUCCESS
        elif succeeded == 0:
            result = AuditResult.FAILURE
        else:
            result = AuditResult.PARTIAL
        self.log(AuditEvent(
            event_type=AuditEventType.SESSION_END,
            result=result,
            operation=operation,
            parameters={"succeeded": succeeded, "failed": failed},
        ))

