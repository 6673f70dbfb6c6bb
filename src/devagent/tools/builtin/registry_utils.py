"""Utility functions for tool registry setup."""

import logging

from devagent.security.whitelist import WhitelistValidator
from devagent.tools.builtin.file import ListDirectoryTool, ReadFileTool, WriteFileTool
from devagent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def register_builtin_tools(registry: ToolRegistry, validator: WhitelistValidator) -> None:
    """Register the built-in file tools and bind them to ``validator``.

    Args:
        registry: ToolRegistry to register tools in
        validator: Whitelist every file tool must consult
    """
    for tool in (ReadFileTool(), ListDirectoryTool(), WriteFileTool()):
        tool.bind_whitelist(validator)
        registry.register(tool)

    logger.info("Registered 3 built-in tools")
