"""Tool loader - imports host tools named in the configuration."""

from __future__ import annotations

import importlib

from mcp_tool_server.tools.base import Tool


class ToolLoadError(Exception):
    """Raised when a tool fails to load."""

    pass


def load_tool(spec: str) -> Tool:
    """Import and instantiate a tool from a 'package.module:ClassName' path.

    Args:
        spec: Import path of a Tool subclass with a no-argument constructor.

    Returns:
        Tool instance.

    Raises:
        ToolLoadError: If the path is malformed, the module or class cannot be
            found, or the class is not a Tool.
    """
    module_name, sep, class_name = spec.partition(":")
    if not sep or not module_name or not class_name:
        raise ToolLoadError(f"Invalid tool path '{spec}', expected 'package.module:ClassName'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ToolLoadError(f"Cannot import module '{module_name}': {e}") from e

    tool_class = getattr(module, class_name, None)
    if tool_class is None:
        raise ToolLoadError(f"No {class_name} in module '{module_name}'")

    if not isinstance(tool_class, type) or not issubclass(tool_class, Tool):
        raise ToolLoadError(f"{spec} must be a subclass of Tool")

    try:
        return tool_class()
    except Exception as e:
        raise ToolLoadError(f"Failed to instantiate {spec}: {e}") from e


def load_tools(specs: list[str]) -> list[Tool]:
    """Load several tools, in order.

    Raises:
        ToolLoadError: On the first tool that fails to load.
    """
    return [load_tool(spec) for spec in specs]
