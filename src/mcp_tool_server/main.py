"""MCP Tool Server - command line entry point.

Serves host-supplied tools to an MCP client over stdin/stdout.

================================================================================
DEVELOPER GUIDE: Exposing Your Own Tools
================================================================================

1. CREATE YOUR TOOL
   Subclass mcp_tool_server.tools.BaseTool (see tools/base.py). Implement the
   name, description and input_schema properties and do_execute(). Raise
   ToolValidationError for bad arguments; any other exception is reported to
   the client as an internal error.

2. LIST IT IN THE CONFIG FILE

    version: "1.0"
    tools:
      - "my_package.tools:EchoTool"

3. RUN THE SERVER

    mcp-tool-server --config config.yaml

   Add --debug (or set MCP_DEBUG=1) to echo every message to stderr.

Only JSON-RPC messages are ever written to stdout; all diagnostics go to
stderr.
================================================================================
"""

from __future__ import annotations

import argparse
import codecs
import io
import json
import sys
from pathlib import Path
from typing import TextIO

from mcp_tool_server.audit import AuditLogger
from mcp_tool_server.config import ConfigLoadError, load_config
from mcp_tool_server.protocol.lifecycle import MCP_PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from mcp_tool_server.protocol.transport import StdioTransport
from mcp_tool_server.server import MCPServer
from mcp_tool_server.tools.loader import ToolLoadError, load_tools
from mcp_tool_server.tools.registry import ToolRegistrationError, ToolRegistry

DEMO_MESSAGES = [
    (
        "Initialize Request",
        {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "initialize",
            "params": {
                "protocolVersion": MCP_PROTOCOL_VERSION,
                "clientInfo": {"name": "example-client", "version": "1.0.0"},
                "capabilities": {},
            },
        },
    ),
    (
        "Tools List Request",
        {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
    ),
    (
        "Tool Call Request",
        {
            "jsonrpc": "2.0",
            "id": 3,
            "method": "tools/call",
            "params": {"name": "echo", "arguments": {"message": "hello"}},
        },
    ),
]


def print_demo() -> None:
    """Print example requests a client would send."""
    print("=== MCP Server Demo Mode ===\n")
    for i, (title, message) in enumerate(DEMO_MESSAGES, start=1):
        print(f"Example {i}: {title}")
        print(json.dumps(message, indent=4))
        print()
    print("Send one JSON object per line on stdin, e.g.:")
    print(f"  echo '{json.dumps(DEMO_MESSAGES[1][1])}' | {SERVER_NAME} --config config.yaml")


def use_utf8(stream: TextIO) -> None:
    """Switch a real text stream to UTF-8, the encoding of the wire format."""
    if not isinstance(stream, io.TextIOWrapper):
        return
    if codecs.lookup(stream.encoding).name != "utf-8":
        stream.reconfigure(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP Tool Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to server config YAML file (default: built-in defaults)",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Echo every message read and written to stderr",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Print example requests and exit",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"{SERVER_NAME} {SERVER_VERSION}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)

    if args.demo:
        print_demo()
        return 0

    try:
        config = load_config(args.config)
    except ConfigLoadError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    registry = ToolRegistry()
    try:
        for tool in load_tools(config.tools):
            registry.register(tool)
    except (ToolLoadError, ToolRegistrationError) as e:
        print(f"Error registering tools: {e}", file=sys.stderr)
        return 1

    audit_logger = AuditLogger(Path(config.audit_log_file)) if config.audit_log_file else None

    use_utf8(sys.stdin)
    use_utf8(sys.stdout)

    transport = StdioTransport(debug=args.debug or config.debug)
    server = MCPServer(
        transport=transport,
        registry=registry,
        server_info=config.server_info,
        audit_logger=audit_logger,
    )

    if args.config:
        transport.log(f"Config loaded from: {args.config}")
    if transport.debug:
        transport.log(f"Configuration: {json.dumps(config.to_dict())}")
    transport.log(f"Registered {registry.count()} tool(s): {', '.join(registry.get_names())}")

    try:
        server.run()
    except KeyboardInterrupt:
        transport.log("Interrupted, shutting down")
        return 130  # Standard exit code for SIGINT

    return 0


if __name__ == "__main__":
    sys.exit(main())
