"""MCP lifecycle management.

Handles the initialize handshake and tracks connection state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Protocol version this server speaks
MCP_PROTOCOL_VERSION = "2024-11-05"

SERVER_NAME = "mcp-tool-server"
SERVER_VERSION = "1.0.0"


class LifecycleState(Enum):
    """MCP connection lifecycle states."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class ProtocolError(Exception):
    """Raised when protocol constraints are violated."""

    pass


@dataclass
class LifecycleManager:
    """Manages MCP connection lifecycle.

    The state moves from UNINITIALIZED to INITIALIZED on the first successful
    initialize request and never goes back.
    """

    server_info: dict[str, str] = field(
        default_factory=lambda: {"name": SERVER_NAME, "version": SERVER_VERSION}
    )
    capabilities: dict[str, Any] = field(
        default_factory=lambda: {"tools": {"listChanged": False}}
    )
    protocol_version: str = MCP_PROTOCOL_VERSION
    state: LifecycleState = LifecycleState.UNINITIALIZED
    client_info: dict[str, Any] | None = None
    client_capabilities: dict[str, Any] = field(default_factory=dict)

    @property
    def is_initialized(self) -> bool:
        """Check if the handshake has completed."""
        return self.state == LifecycleState.INITIALIZED

    def require_initialized(self) -> None:
        """Assert that the handshake has completed.

        Raises:
            ProtocolError: If initialize has not been called yet.
        """
        if not self.is_initialized:
            raise ProtocolError("Server not initialized")

    def is_version_supported(self, requested_version: Any) -> bool:
        return requested_version == self.protocol_version

    def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle initialize request.

        Version mismatches are tolerated; the server always answers with the
        version it speaks and leaves the decision to the client.

        Args:
            params: Initialize request parameters.

        Returns:
            Initialize response result.

        Raises:
            ProtocolError: If already initialized.
        """
        if self.is_initialized:
            raise ProtocolError("Server already initialized")

        client_info = params.get("clientInfo")
        self.client_info = client_info if isinstance(client_info, dict) else {}
        capabilities = params.get("capabilities")
        self.client_capabilities = capabilities if isinstance(capabilities, dict) else {}

        self.state = LifecycleState.INITIALIZED

        return {
            "protocolVersion": self.protocol_version,
            "serverInfo": dict(self.server_info),
            "capabilities": self.capabilities,
        }
