"""JSON-RPC 2.0 message model.

Parses and serializes the three message shapes exchanged with MCP clients:
requests (including notifications), success responses and error responses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

JSON_RPC_VERSION = "2.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Implementation-defined server errors
SERVER_ERROR_START = -32000
SERVER_ERROR_END = -32099

ERROR_MESSAGES = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
}

SERVER_ERROR_MESSAGE = "Server error"

# Maximum message size (1 MB)
MAX_MESSAGE_SIZE = 1_048_576


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def is_server_error(code: int) -> bool:
    """Check whether a code falls in the implementation-defined server band."""
    return SERVER_ERROR_END <= code <= SERVER_ERROR_START


def canonical_message(code: int, fallback: str) -> str:
    """Return the standard message text for an error code."""
    if is_server_error(code):
        return SERVER_ERROR_MESSAGE
    return ERROR_MESSAGES.get(code, fallback)


def _dumps(payload: dict[str, Any]) -> str:
    # json.dumps never escapes "/" so paths and URLs stay readable
    return json.dumps(payload, separators=(",", ":"))


def _is_valid_id(value: Any) -> bool:
    return isinstance(value, int | str) and not isinstance(value, bool)


def parse_json(raw: str) -> dict[str, Any]:
    """Decode a raw message into a JSON object.

    Args:
        raw: Raw JSON string.

    Returns:
        Decoded object.

    Raises:
        JsonRpcError: PARSE_ERROR if the text is oversized, is not valid JSON,
            or does not decode to an object.
    """
    # Check message size before parsing to prevent DoS
    if len(raw) > MAX_MESSAGE_SIZE:
        raise JsonRpcError(
            PARSE_ERROR, f"Message too large: {len(raw)} bytes exceeds {MAX_MESSAGE_SIZE} limit"
        )

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise JsonRpcError(PARSE_ERROR, f"Parse error: {e}") from e
    except RecursionError as e:
        raise JsonRpcError(PARSE_ERROR, "Parse error: message nested too deeply") from e

    if not isinstance(data, dict):
        raise JsonRpcError(PARSE_ERROR, "Invalid JSON-RPC message format: expected an object")

    return data


def validate_envelope(data: dict[str, Any]) -> None:
    """Check the protocol version tag of a decoded message.

    Raises:
        JsonRpcError: INVALID_REQUEST unless ``jsonrpc`` is exactly "2.0".
    """
    if data.get("jsonrpc") != JSON_RPC_VERSION:
        raise JsonRpcError(INVALID_REQUEST, "Invalid JSON-RPC version. Expected \"2.0\"")


@dataclass(frozen=True)
class JsonRpcRequest:
    """A JSON-RPC request. A request without an id is a notification."""

    method: str
    id: int | str | None = None
    params: dict[str, Any] | None = None

    @classmethod
    def from_json(cls, raw: str) -> JsonRpcRequest:
        """Parse a request from a JSON string.

        Raises:
            JsonRpcError: PARSE_ERROR for undecodable text, INVALID_REQUEST for
                a malformed envelope or fields.
        """
        return cls.from_dict(parse_json(raw))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonRpcRequest:
        """Build a request from a decoded object.

        Raises:
            JsonRpcError: INVALID_REQUEST if the message shape is wrong.
        """
        validate_envelope(data)

        method = data.get("method")
        if not isinstance(method, str):
            raise JsonRpcError(INVALID_REQUEST, "Request must have a string \"method\" field")

        params = data.get("params")
        if params is not None and not isinstance(params, dict):
            raise JsonRpcError(INVALID_REQUEST, "Request params must be an object")

        # A null id is treated the same as a missing one
        msg_id = data.get("id")
        if msg_id is not None and not _is_valid_id(msg_id):
            raise JsonRpcError(INVALID_REQUEST, "Request id must be an integer or string")

        return cls(method=method, id=msg_id, params=params)

    def is_notification(self) -> bool:
        """Return True if no response is expected for this request."""
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"jsonrpc": JSON_RPC_VERSION}
        if self.id is not None:
            data["id"] = self.id
        data["method"] = self.method
        if self.params is not None:
            data["params"] = self.params
        return data

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass(frozen=True)
class JsonRpcResponse:
    """A successful JSON-RPC response."""

    id: int | str
    result: Any

    @classmethod
    def from_json(cls, raw: str) -> JsonRpcResponse:
        return cls.from_dict(parse_json(raw))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonRpcResponse:
        """Build a response from a decoded object.

        The ``result`` key must be present; its value may be null.

        Raises:
            JsonRpcError: INVALID_REQUEST if the message shape is wrong.
        """
        validate_envelope(data)

        if not _is_valid_id(data.get("id")):
            raise JsonRpcError(INVALID_REQUEST, "Response must have an integer or string \"id\"")

        if "result" not in data:
            raise JsonRpcError(INVALID_REQUEST, "Success response must have a \"result\" field")

        return cls(id=data["id"], result=data["result"])

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSON_RPC_VERSION,
            "id": self.id,
            "result": self.result,
        }

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass(frozen=True)
class JsonRpcErrorResponse:
    """A JSON-RPC error response.

    The id is None when the error happened before the request id could be
    read, e.g. for malformed JSON.
    """

    id: int | str | None
    code: int
    message: str
    data: Any | None = None

    @classmethod
    def from_json(cls, raw: str) -> JsonRpcErrorResponse:
        return cls.from_dict(parse_json(raw))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonRpcErrorResponse:
        """Build an error response from a decoded object.

        Raises:
            JsonRpcError: INVALID_REQUEST if the message shape is wrong.
        """
        validate_envelope(data)

        error = data.get("error")
        if not isinstance(error, dict):
            raise JsonRpcError(INVALID_REQUEST, "Error response must have an \"error\" object")

        code = error.get("code")
        if not isinstance(code, int) or isinstance(code, bool):
            raise JsonRpcError(INVALID_REQUEST, "Error must have an integer \"code\" field")

        message = error.get("message")
        if not isinstance(message, str):
            raise JsonRpcError(INVALID_REQUEST, "Error must have a string \"message\" field")

        msg_id = data.get("id")
        if msg_id is not None and not _is_valid_id(msg_id):
            raise JsonRpcError(INVALID_REQUEST, "Error response id must be an integer, string or null")

        return cls(id=msg_id, code=code, message=message, data=error.get("data"))

    @classmethod
    def from_error(cls, msg_id: int | str | None, error: JsonRpcError) -> JsonRpcErrorResponse:
        """Convert a raised JsonRpcError into a response.

        The canonical text for the code becomes the message and the exception
        text becomes the data, unless the exception already carries data.
        """
        message = canonical_message(error.code, error.message)
        data = error.data if error.data is not None else error.message
        return cls(id=msg_id, code=error.code, message=message, data=data)

    @classmethod
    def parse_error(cls, details: str | None = None) -> JsonRpcErrorResponse:
        return cls(None, PARSE_ERROR, ERROR_MESSAGES[PARSE_ERROR], details)

    @classmethod
    def invalid_request(
        cls, msg_id: int | str | None = None, details: str | None = None
    ) -> JsonRpcErrorResponse:
        return cls(msg_id, INVALID_REQUEST, ERROR_MESSAGES[INVALID_REQUEST], details)

    @classmethod
    def method_not_found(cls, msg_id: int | str, method: str) -> JsonRpcErrorResponse:
        return cls(msg_id, METHOD_NOT_FOUND, ERROR_MESSAGES[METHOD_NOT_FOUND], {"method": method})

    @classmethod
    def invalid_params(cls, msg_id: int | str, details: str | None = None) -> JsonRpcErrorResponse:
        return cls(msg_id, INVALID_PARAMS, ERROR_MESSAGES[INVALID_PARAMS], details)

    @classmethod
    def internal_error(
        cls, msg_id: int | str | None = None, details: str | None = None
    ) -> JsonRpcErrorResponse:
        return cls(msg_id, INTERNAL_ERROR, ERROR_MESSAGES[INTERNAL_ERROR], details)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error["data"] = self.data

        return {
            "jsonrpc": JSON_RPC_VERSION,
            "id": self.id,
            "error": error,
        }

    def to_json(self) -> str:
        return _dumps(self.to_dict())


JsonRpcMessage = JsonRpcRequest | JsonRpcResponse | JsonRpcErrorResponse
