"""Tool executors, one per tool kind."""

from __future__ import annotations

from typing import Optional

import httpx

from dynamic_mcp.executors.base import Executor
from dynamic_mcp.executors.command_executor import CommandExecutor
from dynamic_mcp.executors.http_executor import HttpExecutor
from dynamic_mcp.models.tool_definition import ToolDefinition


def build_executor(
    tool: ToolDefinition,
    *,
    timeout: float,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Executor:
    if tool.kind == "HTTP":
        return HttpExecutor(tool, timeout=timeout, transport=http_transport)
    return CommandExecutor(tool, timeout=timeout)


__all__ = ["CommandExecutor", "Executor", "HttpExecutor", "build_executor"]
