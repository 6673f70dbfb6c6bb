"""
Logging setup for DevAgent.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where the "devagent" logger tree writes to. Each handler carries a
SanitizingFilter, so no record reaches the console or a log file without
passing through the error sanitizer.

Usage:
    from devagent.logging_config import configure_logging
    configure_logging(level="INFO", json_output=True)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from devagent.security.sanitizer import ErrorSanitizer, SanitizingFilter

ROOT_LOGGER = "devagent"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("tool_name", "duration", "success"):
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value
        return json.dumps(log_data, default=str)


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    sanitizer: ErrorSanitizer | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the devagent logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Write JSON lines instead of rich console output.
        sanitizer: Sanitizer applied to every record.
        console: Console for rich output (default: stderr).

    Returns:
        The configured "devagent" logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()

    handler: logging.Handler
    if json_output:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )

    handler.addFilter(SanitizingFilter(sanitizer))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
