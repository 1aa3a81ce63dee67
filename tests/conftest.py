"""Pytest configuration and shared fixtures."""

import io
from typing import Any

import pytest

from mcp_tool_server.protocol.transport import StdioTransport
from mcp_tool_server.server import MCPServer
from mcp_tool_server.tools.base import BaseTool, ToolValidationError
from mcp_tool_server.tools.registry import ToolRegistry


class EchoTool(BaseTool):
    """Echoes its message argument."""

    @property
    def name(self) -> str:
        return "echo"

    @property
    def description(self) -> str:
        return "Echoes input"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        }

    def do_execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return self.create_result(arguments["message"])


class CrashTool(BaseTool):
    """Always fails."""

    @property
    def name(self) -> str:
        return "crash"

    @property
    def description(self) -> str:
        return "Always crashes"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object"}

    def do_execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        raise RuntimeError("Intentional crash for testing")


class PickyTool(BaseTool):
    """Rejects its arguments from inside do_execute."""

    @property
    def name(self) -> str:
        return "picky"

    @property
    def description(self) -> str:
        return "Rejects every value"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {}

    def do_execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        raise ToolValidationError("value is not acceptable")


@pytest.fixture
def registry() -> ToolRegistry:
    """Registry with echo, crash and picky tools."""
    registry = ToolRegistry()
    registry.register(EchoTool())
    registry.register(CrashTool())
    registry.register(PickyTool())
    return registry


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def stderr() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def transport(stdout: io.StringIO, stderr: io.StringIO) -> StdioTransport:
    """Transport over in-memory streams."""
    return StdioTransport(stdin=io.StringIO(), stdout=stdout, stderr=stderr)


@pytest.fixture
def server(transport: StdioTransport, registry: ToolRegistry) -> MCPServer:
    """Server with the test registry attached."""
    return MCPServer(transport=transport, registry=registry)


@pytest.fixture
def initialized_server(server: MCPServer) -> MCPServer:
    """Server that has completed the initialize handshake."""
    server.process_message(
        '{"jsonrpc":"2.0","id":0,"method":"initialize",'
        '"params":{"protocolVersion":"2024-11-05","capabilities":{}}}'
    )
    return server
