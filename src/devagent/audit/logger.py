"""
Audit logging for DevAgent operations.

JSON Lines audit trail of tool executions, model calls, turn outcomes and
whitelist changes. Every string written is sanitized first, so the file
never holds credentials or user home paths.
"""

import gzip
import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from devagent.security.sanitizer import ErrorSanitizer
from devagent.tools.metrics import ExecutionEvent

if TYPE_CHECKING:
    from devagent.config.schema import AuditConfig

logger = logging.getLogger(__name__)


class AuditEventType(str, Enum):
    """Types of audit events."""

    TOOL_EXECUTION = "tool_execution"
    MODEL_CALL = "model_call"
    TURN_COMPLETE = "turn_complete"
    TURN_FAILED = "turn_failed"
    WHITELIST_CHANGED = "whitelist_changed"


class AuditLogger:
    """
    JSON Lines based audit logger.

    Events are buffered and appended to the log on :meth:`flush` or when the
    buffer fills. The file is rotated (and gzip-compressed) once it grows
    past ``max_size_mb``.
    """

    def __init__(
        self,
        log_path: str | Path,
        enable: bool = True,
        buffer_size: int = 20,
        max_size_mb: int = 50,
        sanitizer: ErrorSanitizer | None = None,
    ) -> None:
        """
        Initialize the audit logger.

        Args:
            log_path: Path to the audit log file
            enable: Whether audit logging is enabled
            buffer_size: Number of events to buffer before flush
            max_size_mb: Rotate the log when it reaches this size
            sanitizer: Sanitizer applied to every event field
        """
        self.log_path = Path(log_path).expanduser()
        self.enable = enable
        self.buffer_size = buffer_size
        self.max_size_mb = max_size_mb
        self.sanitizer = sanitizer or ErrorSanitizer()
        self._buffer: list[dict[str, Any]] = []

        if self.enable:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(
        cls, config: "AuditConfig", default_path: Path, sanitizer: ErrorSanitizer | None = None
    ) -> "AuditLogger":
        return cls(
            log_path=Path(config.path) if config.path else default_path,
            enable=config.enable,
            buffer_size=config.buffer_size,
            sanitizer=sanitizer,
        )

    def _create_event(self, event_type: AuditEventType, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "timestamp": datetime.now().isoformat(),
            "event_type": event_type.value,
            **self.sanitizer.sanitize_metadata(data),
        }

    def _write_event(self, event: dict[str, Any]) -> None:
        if not self.enable:
            return

        self._buffer.append(event)
        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Flush buffered events to disk."""
        if not self.enable or not self._buffer:
            return

        self._rotate_if_needed()
        with self.log_path.open("a", encoding="utf-8") as f:
            for event in self._buffer:
                f.write(json.dumps(event, default=str) + "\n")
        self._buffer.clear()

    def close(self) -> None:
        self.flush()

    def _rotate_if_needed(self) -> None:
        if not self.log_path.exists():
            return
        size_mb = self.log_path.stat().st_size / (1024 * 1024)
        if size_mb < self.max_size_mb:
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        rotated = self.log_path.with_name(f"{self.log_path.stem}_{timestamp}{self.log_path.suffix}")
        self.log_path.rename(rotated)

        compressed = rotated.with_suffix(rotated.suffix + ".gz")
        with rotated.open("rb") as f_in, gzip.open(compressed, "wb") as f_out:
            f_out.write(f_in.read())
        rotated.unlink()
        logger.info(f"Rotated audit log to {compressed.name}")

    # TelemetrySink

    def record(self, event: ExecutionEvent) -> None:
        """Record an execution event from the tool engine or the orchestrator."""
        event_type = (
            AuditEventType.MODEL_CALL
            if event.operation == "model_call"
            else AuditEventType.TOOL_EXECUTION
        )
        self._write_event(
            self._create_event(
                event_type,
                {
                    "operation": event.operation,
                    "success": event.success,
                    "duration": round(event.duration, 4),
                    **event.metadata,
                },
            )
        )

    # Convenience methods

    def log_turn_complete(self, iterations: int, tool_calls: int, model: str) -> None:
        self._write_event(
            self._create_event(
                AuditEventType.TURN_COMPLETE,
                {"iterations": iterations, "tool_calls": tool_calls, "model": model},
            )
        )

    def log_turn_failed(self, error_type: str, detail: str) -> None:
        self._write_event(
            self._create_event(
                AuditEventType.TURN_FAILED,
                {"error_type": error_type, "detail": detail},
            )
        )

    def log_whitelist_change(self, action: str, path: str) -> None:
        self._write_event(
            self._create_event(
                AuditEventType.WHITELIST_CHANGED,
                {"action": action, "path": path},
            )
        )

    def get_recent_events(self, limit: int = 50) -> list[dict[str, Any]]:
        """Read the most recent events from the log (flushed events only)."""
        if not self.log_path.exists():
            return []
        with self.log_path.open(encoding="utf-8") as f:
            lines = f.readlines()
        events = []
        for line in lines[-limit:]:
            line = line.strip()
            if line:
                events.append(json.loads(line))
        return events
