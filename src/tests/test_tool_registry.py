from typing import Any

import pytest

from dynamic_mcp.errors import ConfigError
from dynamic_mcp.executors import CommandExecutor
from dynamic_mcp.executors import HttpExecutor
from dynamic_mcp.models import ServerConfig
from dynamic_mcp.models import ToolDefinition
from dynamic_mcp.tool_registry import ToolRegistry


def _tool(name: str, **extra: Any) -> ToolDefinition:
    data: dict[str, Any] = {"name": name, "kind": "COMMAND", "command_metadata": {"command": "echo"}}
    data.update(extra)
    return ToolDefinition.model_validate(data)


def test_lookup_and_listing_preserve_configuration_order() -> None:
    registry = ToolRegistry([_tool("zeta"), _tool("alpha"), _tool("mid")])

    assert [tool.name for tool in registry.list_tools()] == ["zeta", "alpha", "mid"]
    assert len(registry) == 3
    assert "alpha" in registry
    assert "nope" not in registry
    assert registry.lookup("alpha") is not None
    assert registry.lookup("nope") is None


def test_listing_is_a_copy() -> None:
    registry = ToolRegistry([_tool("one")])

    registry.list_tools().clear()

    assert len(registry.list_tools()) == 1


def test_duplicate_names_are_rejected() -> None:
    with pytest.raises(ConfigError, match="Duplicate"):
        ToolRegistry([_tool("same"), _tool("same")])


def test_bad_template_is_rejected_at_build_time() -> None:
    tool = ToolDefinition.model_validate(
        {"name": "bad", "kind": "HTTP", "http_metadata": {"url": "https://x.test/{ input.q | nope }"}}
    )

    with pytest.raises(ConfigError, match="bad"):
        ToolRegistry([tool])


def test_invalid_schema_is_rejected_at_build_time() -> None:
    with pytest.raises(ConfigError):
        ToolRegistry([_tool("bad", input_schema={"type": 5})])


def test_executors_match_tool_kind_and_timeout() -> None:
    http_tool = ToolDefinition.model_validate(
        {"name": "web", "kind": "HTTP", "http_metadata": {"url": "https://x.test/"}}
    )
    registry = ToolRegistry([http_tool, _tool("cmd", timeout=2)], default_timeout=7)

    assert isinstance(registry.executor("web"), HttpExecutor)
    assert isinstance(registry.executor("cmd"), CommandExecutor)
    assert registry.executor("web").timeout == 7
    assert registry.executor("cmd").timeout == 2
    with pytest.raises(KeyError):
        registry.executor("missing")


def test_from_config_uses_execution_timeout() -> None:
    config = ServerConfig(tools=[_tool("one")], execution_timeout=12)

    registry = ToolRegistry.from_config(config)

    assert registry.executor("one").timeout == 12
