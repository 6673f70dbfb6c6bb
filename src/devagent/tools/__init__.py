"""Tool use system for DevAgent.

This package provides the foundation for tool use:
- Tool base class and registry
- Content blocks exchanged with the model
- Concurrent execution engine with per-tool timeouts
- Usage metrics

Filesystem tools always go through the whitelist validator.
"""

from devagent.tools.base import (
    FileSystemTool,
    Tool,
    ToolInputError,
    ToolNotFoundError,
    ToolTimeoutError,
    WhitelistNotBoundError,
)
from devagent.tools.execution import ToolExecutionEngine
from devagent.tools.metrics import ExecutionEvent, TelemetrySink, ToolMetricsTracker
from devagent.tools.models import (
    ContentBlock,
    TextBlock,
    ToolExecutionResult,
    ToolParameter,
    ToolRequestBlock,
    ToolResultBlock,
)
from devagent.tools.registry import ToolRegistry

__all__ = [
    "ContentBlock",
    "ExecutionEvent",
    "FileSystemTool",
    "TelemetrySink",
    "TextBlock",
    "Tool",
    "ToolExecutionEngine",
    "ToolExecutionResult",
    "ToolInputError",
    "ToolMetricsTracker",
    "ToolNotFoundError",
    "ToolParameter",
    "ToolRegistry",
    "ToolRequestBlock",
    "ToolResultBlock",
    "ToolTimeoutError",
    "WhitelistNotBoundError",
]
