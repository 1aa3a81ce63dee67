"""Server configuration loader.

Configuration comes from an optional YAML file, with a few settings that
can be overridden from the environment:

    MCP_DEBUG       Echo protocol traffic to stderr (1/true/yes/on)
    MCP_AUDIT_LOG   Path of the JSON Lines audit log
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mcp_tool_server.protocol.lifecycle import SERVER_NAME, SERVER_VERSION

TRUTHY_VALUES = ("1", "true", "yes", "on")


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str, env: Mapping[str, str] | None = None) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.
        env: Environment to expand from (defaults to os.environ).

    Returns:
        String with known environment variables expanded.
    """
    env = os.environ if env is None else env
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = env.get(var_name)
        if env_value is not None:
            return env_value
        # Special handling for HOME
        if var_name == "HOME":
            return os.path.expanduser("~")
        return match.group(0)  # Return unchanged if not found

    return pattern.sub(replacer, value)


def parse_bool(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY_VALUES


@dataclass
class ServerConfig:
    """Server configuration.

    Built from the YAML mapping by from_dict(); every field has a default so
    the server can run without a config file.
    """

    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    debug: bool = False
    audit_log_file: str = ""
    tools: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(
        cls, config: dict[str, Any], env: Mapping[str, str] | None = None
    ) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.
            env: Environment used for overrides (defaults to os.environ).

        Returns:
            ServerConfig instance with all settings populated.

        Raises:
            ConfigLoadError: If a section has the wrong type.
        """
        env = os.environ if env is None else env

        server = config.get("server") or {}
        audit = config.get("audit") or {}
        if not isinstance(server, dict) or not isinstance(audit, dict):
            raise ConfigLoadError("'server' and 'audit' sections must be mappings")

        tools = config.get("tools") or []
        if not isinstance(tools, list) or not all(isinstance(t, str) for t in tools):
            raise ConfigLoadError("'tools' must be a list of 'package.module:ClassName' strings")

        debug = parse_bool(config.get("debug", False))
        if "MCP_DEBUG" in env:
            debug = parse_bool(env["MCP_DEBUG"])

        log_file = env.get("MCP_AUDIT_LOG") or audit.get("log_file", "")

        return cls(
            server_name=str(server.get("name", SERVER_NAME)),
            server_version=str(server.get("version", SERVER_VERSION)),
            debug=debug,
            audit_log_file=expand_env_vars(str(log_file), env),
            tools=list(tools),
        )

    @property
    def server_info(self) -> dict[str, str]:
        return {"name": self.server_name, "version": self.server_version}

    def to_dict(self) -> dict[str, Any]:
        """Summarize the configuration, e.g. for startup logging."""
        return {
            "server": self.server_info,
            "debug": self.debug,
            "audit_log_file": self.audit_log_file,
            "tools": list(self.tools),
        }


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        path: Path to the config YAML file, or None for defaults.
        env: Environment used for overrides (defaults to os.environ).

    Returns:
        ServerConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed, or validated.
    """
    if path is None:
        return ServerConfig.from_dict({}, env)

    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse config YAML: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError("Config must be a YAML mapping")

    if "version" not in config:
        raise ConfigLoadError("Config must include 'version' field")

    return ServerConfig.from_dict(config, env)
