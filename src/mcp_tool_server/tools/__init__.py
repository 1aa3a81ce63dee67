"""Tool interface, registry and loader."""

from mcp_tool_server.tools.base import BaseTool, Tool, ToolValidationError
from mcp_tool_server.tools.loader import ToolLoadError, load_tool, load_tools
from mcp_tool_server.tools.registry import ToolRegistrationError, ToolRegistry

__all__ = [
    "BaseTool",
    "Tool",
    "ToolLoadError",
    "ToolRegistrationError",
    "ToolRegistry",
    "ToolValidationError",
    "load_tool",
    "load_tools",
]
