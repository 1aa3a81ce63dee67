"""MCP Tool Server - JSON-RPC 2.0 tool execution over stdio."""

from mcp_tool_server.protocol.lifecycle import SERVER_VERSION as __version__
from mcp_tool_server.server import MCPServer, Method
from mcp_tool_server.tools.base import BaseTool, Tool, ToolValidationError
from mcp_tool_server.tools.registry import ToolRegistrationError, ToolRegistry

__all__ = [
    "BaseTool",
    "MCPServer",
    "Method",
    "Tool",
    "ToolRegistrationError",
    "ToolRegistry",
    "ToolValidationError",
    "__version__",
]
