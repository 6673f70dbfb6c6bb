"""Tests for the tool registry."""

import pytest

from devagent.security import WhitelistValidator
from devagent.tools.base import ToolNotFoundError
from devagent.tools.builtin import ReadFileTool, WriteFileTool, register_builtin_tools
from devagent.tools.registry import ToolRegistry


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_register_and_get(self) -> None:
        registry = ToolRegistry()
        tool = ReadFileTool()

        registry.register(tool)

        assert registry.get("read_file") is tool
        assert "read_file" in registry
        assert len(registry) == 1

    def test_register_duplicate(self) -> None:
        registry = ToolRegistry()
        registry.register(ReadFileTool())

        with pytest.raises(ValueError, match="already registered"):
            registry.register(ReadFileTool())

    def test_get_missing(self) -> None:
        registry = ToolRegistry()

        assert registry.get("nope") is None
        with pytest.raises(ToolNotFoundError):
            registry.require("nope")

    def test_unregister(self) -> None:
        registry = ToolRegistry()
        registry.register(ReadFileTool())

        assert registry.unregister("read_file") is True
        assert registry.unregister("read_file") is False
        assert len(registry) == 0

    def test_list_and_definitions(self) -> None:
        registry = ToolRegistry()
        registry.register(ReadFileTool())
        registry.register(WriteFileTool())

        assert registry.list_tool_names() == ["read_file", "write_file"]
        assert [d["name"] for d in registry.get_tool_definitions()] == ["read_file", "write_file"]

    def test_bind_whitelist(self) -> None:
        registry = ToolRegistry()
        registry.register(ReadFileTool())
        validator = WhitelistValidator()

        registry.bind_whitelist(validator)

        assert registry.require("read_file").whitelist is validator

    def test_clear(self) -> None:
        registry = ToolRegistry()
        registry.register(ReadFileTool())
        registry.clear()
        assert len(registry) == 0

    def test_register_builtin_tools(self, validator: WhitelistValidator) -> None:
        registry = ToolRegistry()

        register_builtin_tools(registry, validator)

        assert sorted(registry.list_tool_names()) == ["list_directory", "read_file", "write_file"]
        assert all(tool.whitelist is validator for tool in registry.list_tools())

    def test_registries_are_independent(self) -> None:
        first = ToolRegistry()
        second = ToolRegistry()
        first.register(ReadFileTool())

        assert "read_file" not in second
