"""Tool registry - name-keyed catalog of the tools a server exposes."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from mcp_tool_server.tools.base import Tool


class ToolRegistrationError(Exception):
    """Raised when a tool cannot be registered."""

    pass


class ToolRegistry:
    """Holds registered tools in registration order.

    Tools are supplied by the host; the registry only keeps references to
    them. Registration is a setup step done before the server loop starts.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool.

        Args:
            tool: Tool instance to register.

        Raises:
            ToolRegistrationError: If a tool with the same name exists.
        """
        name = tool.name
        if name in self._tools:
            raise ToolRegistrationError(f"Tool with name '{name}' is already registered")

        self._tools[name] = tool

    def get(self, name: str) -> Tool | None:
        """Get a tool by exact name, or None if not registered."""
        return self._tools.get(name)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools in MCP format.

        Returns:
            List of {name, description, inputSchema} dicts in registration order.
        """
        return [tool.to_dict() for tool in self._tools.values()]

    def has(self, name: str) -> bool:
        return name in self._tools

    def count(self) -> int:
        return len(self._tools)

    def get_names(self) -> list[str]:
        return list(self._tools)

    def clear(self) -> None:
        """Remove all registered tools."""
        self._tools.clear()

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))
