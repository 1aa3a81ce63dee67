"""Tests for the tool registry."""

from typing import Any

import pytest

from mcp_tool_server.tools.base import Tool
from mcp_tool_server.tools.registry import ToolRegistrationError, ToolRegistry


class NamedTool(Tool):
    """Minimal tool with a configurable name."""

    def __init__(self, name: str, description: str = "A tool") -> None:
        self._name = name
        self._description = description

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"type": "text", "text": self._name}


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_starts_empty(self):
        """Should have no tools initially."""
        registry = ToolRegistry()

        assert registry.count() == 0
        assert registry.list_tools() == []
        assert registry.get_names() == []

    def test_registers_and_gets_tool(self):
        """Should return the registered instance by name."""
        registry = ToolRegistry()
        tool = NamedTool("a")

        registry.register(tool)

        assert registry.get("a") is tool
        assert registry.has("a")
        assert "a" in registry
        assert len(registry) == 1

    def test_get_unknown_returns_none(self):
        """Should not raise for unknown names."""
        assert ToolRegistry().get("missing") is None
        assert not ToolRegistry().has("missing")

    def test_rejects_duplicate_names(self):
        """Should fail on a duplicate name and keep the first tool."""
        registry = ToolRegistry()
        first = NamedTool("a", "first")
        registry.register(first)

        with pytest.raises(ToolRegistrationError, match="'a' is already registered"):
            registry.register(NamedTool("a", "second"))

        assert registry.count() == 1
        assert registry.get("a") is first

    def test_lists_in_registration_order(self):
        """Should list tools in the order they were registered."""
        registry = ToolRegistry()
        for name in ["zeta", "alpha", "mid"]:
            registry.register(NamedTool(name))

        assert [t["name"] for t in registry.list_tools()] == ["zeta", "alpha", "mid"]
        assert registry.get_names() == ["zeta", "alpha", "mid"]
        assert [t.name for t in registry] == ["zeta", "alpha", "mid"]

    def test_list_uses_mcp_format(self):
        """Should project name, description and inputSchema."""
        registry = ToolRegistry()
        registry.register(NamedTool("a", "Does A"))

        assert registry.list_tools() == [
            {
                "name": "a",
                "description": "Does A",
                "inputSchema": {"type": "object", "properties": {}},
            }
        ]

    def test_list_is_idempotent(self):
        """Should return the same content on repeated calls."""
        registry = ToolRegistry()
        registry.register(NamedTool("a"))
        registry.register(NamedTool("b"))

        assert registry.list_tools() == registry.list_tools()

    def test_lookup_is_exact(self):
        """Should not match names case-insensitively."""
        registry = ToolRegistry()
        registry.register(NamedTool("list-tables"))

        assert registry.get("List-Tables") is None

    def test_clear(self):
        """Should remove all tools and allow re-registration."""
        registry = ToolRegistry()
        registry.register(NamedTool("a"))

        registry.clear()

        assert registry.count() == 0
        registry.register(NamedTool("a"))
        assert registry.count() == 1
