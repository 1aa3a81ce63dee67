"""MCP Server - protocol engine.

Runs the read-dispatch-write loop over a transport, enforces the initialize
handshake and routes requests to the tool registry.
"""

from __future__ import annotations

import json
import time
from enum import Enum
from typing import Any

from mcp_tool_server.audit import AuditLogger
from mcp_tool_server.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcRequest,
    JsonRpcResponse,
    is_server_error,
)
from mcp_tool_server.protocol.lifecycle import LifecycleManager, ProtocolError
from mcp_tool_server.protocol.transport import StdioTransport
from mcp_tool_server.tools.base import ToolValidationError
from mcp_tool_server.tools.registry import ToolRegistry


class Method(Enum):
    """JSON-RPC methods understood by the server."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"

    @classmethod
    def lookup(cls, name: str) -> Method | None:
        """Return the method for a wire name, or None if unknown."""
        try:
            return cls(name)
        except ValueError:
            return None


class MCPServer:
    """MCP Server implementation.

    Provides a complete MCP server that handles:
    - Lifecycle management (initialize handshake)
    - Tool listing and execution
    - Translation of failures into JSON-RPC error responses

    Messages are processed strictly one at a time, so responses are written
    in request order.
    """

    def __init__(
        self,
        transport: StdioTransport | None = None,
        debug: bool = False,
        registry: ToolRegistry | None = None,
        server_info: dict[str, str] | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            transport: Transport to use (defaults to a stdio transport).
            debug: Echo protocol traffic to the diagnostic stream.
            registry: Tool registry; may also be attached later.
            server_info: Server name and version reported by initialize.
            audit_logger: Optional audit trail for tool calls.
        """
        self._transport = transport or StdioTransport(debug=debug)
        if debug:
            self._transport.set_debug(True)

        self._lifecycle = LifecycleManager()
        if server_info:
            self._lifecycle.server_info = dict(server_info)

        self._registry = registry
        self._audit_logger = audit_logger

    @property
    def transport(self) -> StdioTransport:
        return self._transport

    def set_tool_registry(self, registry: ToolRegistry) -> None:
        """Attach the tool registry.

        Args:
            registry: Registry holding the tools to expose.
        """
        self._registry = registry

    def is_initialized(self) -> bool:
        return self._lifecycle.is_initialized

    def get_server_capabilities(self) -> dict[str, Any]:
        return self._lifecycle.capabilities

    def get_client_capabilities(self) -> dict[str, Any]:
        """Get the client's capabilities (empty until initialized)."""
        return self._lifecycle.client_capabilities

    def get_client_info(self) -> dict[str, Any] | None:
        return self._lifecycle.client_info

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools.

        Returns:
            List of tool definitions.
        """
        if self._registry is None:
            return []
        return self._registry.list_tools()

    def run(self) -> None:
        """Process messages until the input stream ends.

        A failure outside per-message dispatch is fatal: it is reported once
        with a null id and the loop stops. The transport is always closed.
        """
        self._transport.log("MCP Server starting...")

        try:
            while not self._transport.is_eof():
                try:
                    message = self._transport.read_message()
                    if message is None:
                        # EOF reached
                        break

                    self.handle_message(message)
                except Exception as e:
                    self._transport.log(f"Fatal error: {e}", is_error=True)
                    self._transport.write_error(JsonRpcErrorResponse.internal_error(None, str(e)))
                    break
        finally:
            self._transport.log("MCP Server shutting down...")
            self.close()

    def handle_message(self, raw_message: str) -> JsonRpcResponse | JsonRpcErrorResponse | None:
        """Handle an incoming message and write the reply, if any.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            The message written, or None for notifications.
        """
        response = self.process_message(raw_message)
        if response is None:
            return None

        if not self._transport.write_message(response) and isinstance(response, JsonRpcResponse):
            # The result could not be serialized; the request still gets an answer
            response = JsonRpcErrorResponse.internal_error(
                response.id, "Failed to serialize response"
            )
            self._transport.write_error(response)
        return response

    def process_message(
        self, raw_message: str
    ) -> JsonRpcResponse | JsonRpcErrorResponse | None:
        """Turn an incoming message into its reply without writing it.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            Response or error response, or None for notifications.
        """
        try:
            request = JsonRpcRequest.from_json(raw_message)
        except JsonRpcError as e:
            # The id is unknown until the message parses
            if e.code == PARSE_ERROR:
                self._transport.log(f"Parse error: {e}", is_error=True)
            else:
                self._transport.log(f"Invalid request: {e}", is_error=True)
            return JsonRpcErrorResponse.from_error(None, e)
        except Exception as e:
            self._transport.log(f"Error reading message: {e}", is_error=True)
            return JsonRpcErrorResponse.internal_error(None, str(e))

        if request.is_notification():
            self._transport.log(f"Received notification: {request.method}")
            return None

        return self._route_request(request)

    def _route_request(self, request: JsonRpcRequest) -> JsonRpcResponse | JsonRpcErrorResponse:
        """Route a request to its handler.

        Args:
            request: The request to handle.

        Returns:
            Exactly one response or error response carrying the request id.
        """
        msg_id = request.id
        params = request.params or {}

        self._transport.log(f"Handling method: {request.method}")

        try:
            match Method.lookup(request.method):
                case Method.INITIALIZE:
                    result = self._handle_initialize(params)
                case Method.TOOLS_LIST:
                    result = self._handle_tools_list()
                case Method.TOOLS_CALL:
                    result = self._handle_tools_call(msg_id, params)
                case _:
                    return JsonRpcErrorResponse.method_not_found(msg_id, request.method)
        except JsonRpcError as e:
            return JsonRpcErrorResponse.from_error(msg_id, e)
        except ToolValidationError as e:
            return JsonRpcErrorResponse.invalid_params(msg_id, str(e))
        except Exception as e:
            self._transport.log(f"Error handling request: {e}", is_error=True)
            return JsonRpcErrorResponse.internal_error(msg_id, str(e))

        return JsonRpcResponse(msg_id, result)

    def _handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the initialize handshake.

        Raises:
            ProtocolError: If the server is already initialized.
        """
        result = self._lifecycle.handle_initialize(params)

        requested_version = params.get("protocolVersion")
        if not self._lifecycle.is_version_supported(requested_version):
            self._transport.log(
                f"Warning: Client protocol version ({requested_version}) differs from "
                f"server version ({self._lifecycle.protocol_version})"
            )

        client_info = self._lifecycle.client_info or {}
        self._transport.log("Server initialized successfully")
        self._transport.log(f"Client: {client_info.get('name', 'unknown')}")

        return result

    def _handle_tools_list(self) -> dict[str, Any]:
        """Handle tools/list.

        Raises:
            ProtocolError: If the server is not initialized.
        """
        self._lifecycle.require_initialized()

        tools = self.list_tools()
        self._transport.log(f"Listing {len(tools)} tool(s)")
        return {"tools": tools}

    def _handle_tools_call(self, msg_id: int | str, params: dict[str, Any]) -> dict[str, Any]:
        """Handle tools/call.

        Raises:
            ProtocolError: If not initialized or no registry is attached.
            JsonRpcError: INVALID_PARAMS for a bad name or arguments,
                METHOD_NOT_FOUND for an unknown tool, INTERNAL_ERROR when
                the tool fails or returns content that is not JSON, or the
                tool's own error when it uses the server error band.
            ToolValidationError: If the tool rejects its arguments.
        """
        self._lifecycle.require_initialized()

        if self._registry is None:
            raise ProtocolError("Tool registry not configured")

        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JsonRpcError(INVALID_PARAMS, 'Missing or invalid "name" parameter')

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Tool arguments must be an object")

        tool = self._registry.get(name)
        if tool is None:
            raise JsonRpcError(METHOD_NOT_FOUND, f"Tool not found: {name}", {"tool": name})

        self._transport.log(f"Calling tool: {name}")
        if self._audit_logger:
            self._audit_logger.log_request(msg_id, name, arguments)

        start = time.perf_counter()
        try:
            content = tool.execute(arguments)
        except ToolValidationError:
            self._audit_response(msg_id, "invalid_params", start)
            raise
        except JsonRpcError as e:
            self._transport.log(f"Tool execution error: {e}", is_error=True)
            self._audit_response(msg_id, "error", start)
            if is_server_error(e.code):
                raise
            raise JsonRpcError(INTERNAL_ERROR, f"Tool execution failed: {e}") from e
        except Exception as e:
            self._transport.log(f"Tool execution error: {e}", is_error=True)
            self._audit_response(msg_id, "error", start)
            raise JsonRpcError(INTERNAL_ERROR, f"Tool execution failed: {e}") from e

        try:
            json.dumps(content)
        except (TypeError, ValueError) as e:
            self._transport.log(f"Tool returned invalid content: {e}", is_error=True)
            self._audit_response(msg_id, "error", start)
            raise JsonRpcError(INTERNAL_ERROR, f"Tool returned invalid content: {e}") from e

        self._audit_response(msg_id, "success", start)
        self._transport.log(f"Tool executed successfully: {name}")

        return {"content": [content]}

    def _audit_response(self, msg_id: int | str, status: str, start: float) -> None:
        if self._audit_logger:
            duration_ms = (time.perf_counter() - start) * 1000
            self._audit_logger.log_response(msg_id, status, duration_ms)

    def close(self) -> None:
        """Close the transport and the audit log."""
        self._transport.close()
        if self._audit_logger:
            self._audit_logger.close()

    def __enter__(self) -> MCPServer:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
