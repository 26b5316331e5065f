"""Immutable tool registry built once from configuration."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import httpx

from dynamic_mcp.errors import ConfigError
from dynamic_mcp.executors import Executor, build_executor
from dynamic_mcp.models.server_config import DEFAULT_EXECUTION_TIMEOUT, ServerConfig
from dynamic_mcp.models.tool_definition import ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Name-indexed tool definitions and their executors.

    Everything is resolved in ``__init__`` (duplicate names, schemas,
    templates), so a constructed registry can be read from any number of
    sessions without locking.
    """

    def __init__(
        self,
        tools: Iterable[ToolDefinition],
        *,
        default_timeout: float = DEFAULT_EXECUTION_TIMEOUT,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        index: dict[str, ToolDefinition] = {}
        executors: dict[str, Executor] = {}
        for tool in tools:
            if tool.name in index:
                raise ConfigError(f"Duplicate tool name: {tool.name!r}")
            index[tool.name] = tool
            executors[tool.name] = build_executor(tool, timeout=default_timeout, http_transport=http_transport)
        self._tools: Mapping[str, ToolDefinition] = MappingProxyType(index)
        self._executors: Mapping[str, Executor] = MappingProxyType(executors)
        self._ordered: tuple[ToolDefinition, ...] = tuple(index.values())
        logger.info("Registered %d tools: %s", len(self._ordered), list(self._tools))

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        *,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ToolRegistry":
        return cls(config.tools, default_timeout=config.execution_timeout, http_transport=http_transport)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._ordered)

    def lookup(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDefinition]:
        """Tools in configuration order."""
        return list(self._ordered)

    def executor(self, name: str) -> Executor:
        executor = self._executors.get(name)
        if executor is None:
            raise KeyError(f"Unknown tool: {name}")
        return executor
