"""Tool base classes.

Defines the interface that all tools must implement, plus a base class that
validates arguments against the tool's JSON Schema before running it.

Example:

    class EchoTool(BaseTool):
        @property
        def name(self) -> str:
            return "echo"

        @property
        def description(self) -> str:
            return "Echoes a message back"

        @property
        def input_schema(self) -> dict[str, Any]:
            return {
                "type": "object",
                "properties": {"message": {"type": "string"}},
                "required": ["message"],
            }

        def do_execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
            return self.create_result(arguments["message"])
"""

from __future__ import annotations

import copy
import json
from abc import ABC, abstractmethod
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError


class ToolValidationError(ValueError):
    """Raised when tool arguments are invalid.

    Reported to the client as JSON-RPC "Invalid params".
    """

    pass


class Tool(ABC):
    """Abstract base class for all tools.

    The server only ever talks to tools through this interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique tool name, e.g. 'list-tables'."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a human-readable description shown to the client."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """Return the JSON Schema describing accepted arguments."""
        pass

    @abstractmethod
    def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Execute the tool.

        Args:
            arguments: Tool arguments.

        Returns:
            A content item, e.g. {"type": "text", "text": "..."}.

        Raises:
            ToolValidationError: If the arguments are invalid.
        """
        pass

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tools/list format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class BaseTool(Tool):
    """Tool with schema validation and result helpers.

    Subclasses implement do_execute() instead of execute(); arguments reach
    it validated and with top-level schema defaults filled in.
    """

    def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        arguments = self.validate_input(arguments)
        return self.do_execute(arguments)

    @abstractmethod
    def do_execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Perform the actual tool execution.

        Args:
            arguments: Validated input arguments.

        Returns:
            A content item.
        """
        pass

    def validate_input(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate arguments against the input schema.

        Args:
            arguments: Arguments to validate.

        Returns:
            A copy of the arguments with schema defaults applied.

        Raises:
            ToolValidationError: If validation fails.
        """
        schema = self.input_schema
        if not schema:
            return arguments

        arguments = self._apply_defaults(arguments, schema)

        # A broken schema is a tool bug, not a client error
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as e:
            raise RuntimeError(f"Invalid schema for tool {self.name}: {e.message}") from e

        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(arguments), key=lambda e: [str(p) for p in e.path])

        if errors:
            messages = []
            for error in errors:
                prefix = f"[{'.'.join(str(p) for p in error.path)}] " if error.path else ""
                messages.append(prefix + error.message)
            raise ToolValidationError("Input validation failed: " + ", ".join(messages))

        return arguments

    @staticmethod
    def _apply_defaults(arguments: dict[str, Any], schema: dict[str, Any]) -> dict[str, Any]:
        result = dict(arguments)
        for key, prop in schema.get("properties", {}).items():
            if key not in result and isinstance(prop, dict) and "default" in prop:
                result[key] = copy.deepcopy(prop["default"])
        return result

    def create_result(self, data: Any, content_type: str = "text") -> dict[str, Any]:
        """Create a content item; non-string data is rendered as pretty JSON."""
        return {
            "type": content_type,
            "text": data if isinstance(data, str) else json.dumps(data, indent=4),
        }

    def create_data_result(self, data: dict[str, Any] | list[Any]) -> dict[str, Any]:
        return {"type": "text", "text": json.dumps(data, indent=4)}

    def create_error(self, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
        """Create an error content item.

        For operational problems the client should see as a normal result.
        Invalid arguments and fatal failures should raise instead.
        """
        text = f"Error: {message}"
        if details is not None:
            text += "\n\nDetails:\n" + json.dumps(details, indent=4)
        return {"type": "text", "text": text}

    def get_required_param(self, arguments: dict[str, Any], name: str) -> Any:
        """Return a required argument.

        Raises:
            ToolValidationError: If the argument is missing.
        """
        if name not in arguments:
            raise ToolValidationError(f"Missing required parameter: {name}")
        return arguments[name]

    def get_optional_param(self, arguments: dict[str, Any], name: str, default: Any = None) -> Any:
        value = arguments.get(name)
        return default if value is None else value

    def format_table(self, headers: list[str], rows: list[list[Any]]) -> str:
        """Render rows as a plain-text table with a dashed separator."""
        if not rows:
            return "No data available."

        widths = [len(header) for header in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(str(cell)))

        def render(cells: list[Any]) -> str:
            return "".join(str(cell).ljust(widths[i] + 2) for i, cell in enumerate(cells)).rstrip()

        lines = [render(headers), "".join("-" * (width + 2) for width in widths)]
        lines.extend(render(row) for row in rows)
        return "\n".join(lines)
