"""Tool registry for managing available tools."""

import logging
from typing import Any, Optional

from devagent.security.whitelist import WhitelistValidator
from devagent.tools.base import Tool, ToolNotFoundError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Name-keyed collection of the tools the model may invoke.

    The registry is passed explicitly to the execution engine; there is no
    process-wide instance.
    """

    def __init__(self):
        """Initialize the tool registry."""
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool.

        Raises:
            ValueError: If tool name already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")

    def unregister(self, name: str) -> bool:
        """Unregister a tool.

        Returns:
            True if tool was unregistered, False if not found
        """
        if name in self._tools:
            del self._tools[name]
            logger.info(f"Unregistered tool: {name}")
            return True
        return False

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name, or None if not found."""
        return self._tools.get(name)

    def require(self, name: str) -> Tool:
        """Get a tool by name.

        Raises:
            ToolNotFoundError: If no tool has that name
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def list_tools(self) -> list[Tool]:
        """Get list of all registered tools."""
        return list(self._tools.values())

    def list_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def get_tool_definitions(self) -> list[dict[str, Any]]:
        """Get tool definitions in the format sent to the model."""
        return [tool.get_tool_definition() for tool in self._tools.values()]

    def bind_whitelist(self, validator: WhitelistValidator) -> None:
        """Bind ``validator`` to every registered tool."""
        for tool in self._tools.values():
            tool.bind_whitelist(validator)
        logger.debug(f"Bound whitelist to {len(self._tools)} tools")

    def clear(self) -> None:
        """Clear all registered tools."""
        self._tools.clear()
        logger.info("Cleared all tools from registry")

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __str__(self) -> str:
        return f"ToolRegistry({len(self._tools)} tools)"

    def __repr__(self) -> str:
        tools = ", ".join(self._tools.keys())
        return f"<ToolRegistry tools=[{tools}]>"
