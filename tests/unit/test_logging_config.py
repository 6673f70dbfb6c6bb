"""Tests for logging setup."""

import io
import json
import logging

from rich.console import Console
from rich.logging import RichHandler

from devagent.constants import API_KEY_MARKER
from devagent.logging_config import JsonFormatter, configure_logging


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_rich_handler(self) -> None:
        buffer = io.StringIO()
        logger = configure_logging(level="INFO", console=Console(file=buffer, width=200))

        assert logger.name == "devagent"
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.propagate is False

        logging.getLogger("devagent.tools").info("Calling with sk-ant-abcdefghijklmnop")

        output = buffer.getvalue()
        assert "sk-ant-" not in output
        assert API_KEY_MARKER in output

    def test_json_output(self) -> None:
        logger = configure_logging(level="debug", json_output=True)

        handler = logger.handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)
        assert logger.level == logging.DEBUG

    def test_reconfigure_replaces_handlers(self) -> None:
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1


class TestJsonFormatter:
    def test_format(self) -> None:
        record = logging.LogRecord(
            name="devagent.tools.execution",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Tool %s failed",
            args=("read_file",),
            exc_info=None,
        )
        record.tool_name = "read_file"

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "devagent.tools.execution"
        assert data["message"] == "Tool read_file failed"
        assert data["tool_name"] == "read_file"
