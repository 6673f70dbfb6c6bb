"""
Tool usage metrics and the telemetry sink interface.

The execution engine reports one ExecutionEvent per tool invocation to every
configured sink. Sinks receive already-sanitized data and must not affect
tool results.
"""

import json
import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionEvent:
    """Structured record of one operation, safe to store or display."""

    operation: str
    success: bool
    duration: float  # seconds
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class TelemetrySink(Protocol):
    """Receives execution events. Implementations own storage and formatting."""

    def record(self, event: ExecutionEvent) -> None: ...


@dataclass
class ToolStats:
    """Aggregate statistics for a tool."""

    tool_name: str
    total_executions: int
    successful_executions: int
    failed_executions: int
    total_execution_time: float
    average_execution_time: float
    success_rate: float
    last_used: float  # unix timestamp


class ToolMetricsTracker:
    """In-memory per-tool statistics with optional JSON persistence."""

    def __init__(self, metrics_file: Optional[Path] = None):
        """Initialize metrics tracker.

        Args:
            metrics_file: Where to persist events; in-memory only when None
        """
        self.metrics_file = metrics_file
        self.events: list[ExecutionEvent] = []
        self._load()

    def _load(self) -> None:
        if self.metrics_file is None or not self.metrics_file.exists():
            return

        try:
            with open(self.metrics_file, encoding="utf-8") as f:
                data = json.load(f)
            self.events = [ExecutionEvent(**event) for event in data.get("events", [])]
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not load tool metrics from {self.metrics_file}: {e}")
            self.events = []

    def save(self) -> None:
        """Write all events to the metrics file, if one is configured."""
        if self.metrics_file is None:
            return

        self.metrics_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "events": [asdict(event) for event in self.events],
            "last_updated": time.time(),
        }
        with open(self.metrics_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def record(self, event: ExecutionEvent) -> None:
        """Record an execution event."""
        self.events.append(event)
        self.save()

    def get_tool_stats(self, tool_name: str) -> Optional[ToolStats]:
        """Get statistics for a specific tool, or None if it was never used."""
        tool_events = [e for e in self.events if e.operation == tool_name]
        if not tool_events:
            return None

        total = len(tool_events)
        successful = sum(1 for e in tool_events if e.success)
        total_time = sum(e.duration for e in tool_events)

        return ToolStats(
            tool_name=tool_name,
            total_executions=total,
            successful_executions=successful,
            failed_executions=total - successful,
            total_execution_time=total_time,
            average_execution_time=total_time / total,
            success_rate=successful / total,
            last_used=max(e.timestamp for e in tool_events),
        )

    def get_all_stats(self) -> list[ToolStats]:
        """Get statistics for all tools, most used first."""
        stats = [self.get_tool_stats(name) for name in {e.operation for e in self.events}]
        result = [s for s in stats if s is not None]
        result.sort(key=lambda s: (-s.total_executions, s.tool_name))
        return result

    def get_total_executions(self) -> int:
        return len(self.events)

    def get_success_rate(self) -> float:
        """Overall success rate (0.0 to 1.0)."""
        if not self.events:
            return 0.0
        return sum(1 for e in self.events if e.success) / len(self.events)

    def get_most_used_tools(self, limit: int = 5) -> list[tuple[str, int]]:
        counts: dict[str, int] = defaultdict(int)
        for event in self.events:
            counts[event.operation] += 1
        return sorted(counts.items(), key=lambda x: x[1], reverse=True)[:limit]

    def clear(self) -> None:
        """Clear all metrics."""
        self.events = []
        self.save()
