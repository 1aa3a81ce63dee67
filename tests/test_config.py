"""Tests for configuration loading."""

from pathlib import Path

import pytest

from mcp_tool_server.config import (
    ConfigLoadError,
    ServerConfig,
    expand_env_vars,
    load_config,
    parse_bool,
)

FULL_CONFIG = """
version: "1.0"
server:
  name: "test-server"
  version: "2.3.4"
debug: true
audit:
  log_file: "/tmp/mcp-audit.jsonl"
tools:
  - "my_tools.echo:EchoTool"
  - "my_tools.time:ClockTool"
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Create a full config file."""
    path = tmp_path / "config.yaml"
    path.write_text(FULL_CONFIG)
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self):
        """Should fall back to built-in defaults."""
        config = load_config(None, env={})

        assert config.server_info == {"name": "mcp-tool-server", "version": "1.0.0"}
        assert config.debug is False
        assert config.audit_log_file == ""
        assert config.tools == []

    def test_loads_all_sections(self, config_file: Path):
        """Should populate every field from YAML."""
        config = load_config(config_file, env={})

        assert config.server_name == "test-server"
        assert config.server_version == "2.3.4"
        assert config.debug is True
        assert config.audit_log_file == "/tmp/mcp-audit.jsonl"
        assert config.tools == ["my_tools.echo:EchoTool", "my_tools.time:ClockTool"]

    def test_missing_file(self, tmp_path: Path):
        """Should raise for a path that does not exist."""
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        """Should wrap YAML syntax errors."""
        path = tmp_path / "bad.yaml"
        path.write_text("version: [unclosed")

        with pytest.raises(ConfigLoadError, match="Failed to parse"):
            load_config(path)

    def test_non_mapping(self, tmp_path: Path):
        """Should require a top-level mapping."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigLoadError, match="YAML mapping"):
            load_config(path)

    def test_requires_version(self, tmp_path: Path):
        """Should reject a config without a version field."""
        path = tmp_path / "noversion.yaml"
        path.write_text("debug: true\n")

        with pytest.raises(ConfigLoadError, match="'version'"):
            load_config(path)


class TestServerConfigFromDict:
    """Tests for ServerConfig.from_dict."""

    def test_env_overrides_debug(self):
        """Should let MCP_DEBUG win over the file."""
        config = ServerConfig.from_dict({"debug": True}, env={"MCP_DEBUG": "0"})

        assert config.debug is False

    def test_env_enables_debug(self):
        config = ServerConfig.from_dict({}, env={"MCP_DEBUG": "yes"})

        assert config.debug is True

    def test_env_overrides_audit_log(self):
        """Should let MCP_AUDIT_LOG win over the file."""
        config = ServerConfig.from_dict(
            {"audit": {"log_file": "/from/file.jsonl"}}, env={"MCP_AUDIT_LOG": "/from/env.jsonl"}
        )

        assert config.audit_log_file == "/from/env.jsonl"

    def test_expands_env_vars_in_log_file(self, monkeypatch: pytest.MonkeyPatch):
        """Should expand ${VAR} references from the given environment only."""
        monkeypatch.setenv("MCP_TEST_LOG_DIR", "/from/process")

        config = ServerConfig.from_dict(
            {"audit": {"log_file": "${MCP_TEST_LOG_DIR}/audit.jsonl"}},
            env={"MCP_TEST_LOG_DIR": "/var/log/mcp"},
        )

        assert config.audit_log_file == "/var/log/mcp/audit.jsonl"

    def test_env_vars_missing_from_given_environment(self, monkeypatch: pytest.MonkeyPatch):
        """Should not fall back to the process environment when one is given."""
        monkeypatch.setenv("MCP_TEST_LOG_DIR", "/from/process")

        config = ServerConfig.from_dict(
            {"audit": {"log_file": "${MCP_TEST_LOG_DIR}/audit.jsonl"}}, env={}
        )

        assert config.audit_log_file == "${MCP_TEST_LOG_DIR}/audit.jsonl"

    @pytest.mark.parametrize(
        "config",
        [
            {"server": "name"},
            {"audit": ["log_file"]},
            {"tools": "my_tools:EchoTool"},
            {"tools": [1, 2]},
        ],
    )
    def test_rejects_wrong_section_types(self, config: dict):
        """Should reject sections of the wrong shape."""
        with pytest.raises(ConfigLoadError):
            ServerConfig.from_dict(config, env={})

    def test_to_dict(self):
        """Should summarize the configuration."""
        config = ServerConfig(tools=["a:B"])

        assert config.to_dict() == {
            "server": {"name": "mcp-tool-server", "version": "1.0.0"},
            "debug": False,
            "audit_log_file": "",
            "tools": ["a:B"],
        }


class TestHelpers:
    """Tests for expand_env_vars and parse_bool."""

    def test_expand_known_variable(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MCP_TEST_VALUE", "expanded")

        assert expand_env_vars("x-${MCP_TEST_VALUE}-y") == "x-expanded-y"

    def test_expand_leaves_unknown_variable(self, monkeypatch: pytest.MonkeyPatch):
        """Should keep references to unset variables unchanged."""
        monkeypatch.delenv("MCP_TEST_UNSET", raising=False)

        assert expand_env_vars("${MCP_TEST_UNSET}/a") == "${MCP_TEST_UNSET}/a"

    @pytest.mark.parametrize("value", ["1", "true", "YES", " on ", True])
    def test_parse_bool_truthy(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "", False])
    def test_parse_bool_falsy(self, value):
        assert parse_bool(value) is False
