"""STDIO transport layer for MCP communication.

Reads newline-delimited JSON-RPC messages from stdin and writes responses to
stdout. Diagnostics go to stderr so they never corrupt the protocol stream.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TextIO

from mcp_tool_server.protocol.jsonrpc import (
    JsonRpcErrorResponse,
    JsonRpcMessage,
    JsonRpcResponse,
)


def _is_standard_stream(stream: TextIO) -> bool:
    return any(
        stream is std
        for std in (
            sys.stdin,
            sys.stdout,
            sys.stderr,
            sys.__stdin__,
            sys.__stdout__,
            sys.__stderr__,
        )
    )


class StdioTransport:
    """STDIO transport for MCP communication.

    Reads JSON-RPC messages from stdin and writes responses to stdout.
    Logging goes to stderr to avoid corrupting the protocol stream.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Input stream (defaults to sys.stdin).
            stdout: Output stream (defaults to sys.stdout).
            stderr: Log stream (defaults to sys.stderr).
            debug: Echo every message read or written to stderr.
        """
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._debug = debug
        self._eof = False

    @property
    def debug(self) -> bool:
        return self._debug

    def set_debug(self, debug: bool) -> None:
        """Enable or disable echoing of protocol traffic to stderr."""
        self._debug = debug

    def read_message(self) -> str | None:
        """Read a message from stdin.

        Reads lines until a non-empty line is found.

        Returns:
            Message string (stripped), or None on EOF.
        """
        while True:
            try:
                line = self._stdin.readline()
            except (OSError, ValueError) as e:
                self.log(f"Failed to read from stdin: {e}", is_error=True)
                self._eof = True
                return None

            if not line:  # EOF
                self._eof = True
                return None

            line = line.strip()
            if line:  # Skip empty lines
                if self._debug:
                    self.log(f"Received: {line}")
                return line

    def write_message(self, message: JsonRpcMessage) -> bool:
        """Write a message to stdout.

        Args:
            message: Message to serialize and write.

        Returns:
            True on success, False if serialization or the write failed.
        """
        try:
            payload = message.to_json()

            if self._debug:
                self.log(f"Sending: {payload}")

            self._stdout.write(payload + "\n")
            self._stdout.flush()
        except (OSError, ValueError, TypeError) as e:
            self.log(f"Error writing message: {e}", is_error=True)
            return False

        return True

    def write_response(self, response: JsonRpcResponse) -> bool:
        """Write a success response to stdout."""
        return self.write_message(response)

    def write_error(self, error: JsonRpcErrorResponse) -> bool:
        """Write an error response to stdout."""
        return self.write_message(error)

    def log(self, message: str, is_error: bool = False) -> None:
        """Write a log message to stderr.

        Args:
            message: Log message.
            is_error: Tag the line as an error instead of info.
        """
        level = "ERROR" if is_error else "INFO"
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._stderr.write(f"[{timestamp}] [{level}] {message}\n")
        self._stderr.flush()

    def is_eof(self) -> bool:
        """Check whether stdin has been exhausted."""
        return self._eof

    def close(self) -> None:
        """Close injected streams.

        The process-wide standard streams are left open; they belong to the
        host process, not the transport.
        """
        for stream in (self._stdin, self._stdout, self._stderr):
            if not _is_standard_stream(stream) and not stream.closed:
                stream.close()
