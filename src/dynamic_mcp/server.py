"""Tool server: registry plus server identity, one dispatcher per session."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from dynamic_mcp.dispatcher import ProtocolDispatcher
from dynamic_mcp.models.server_config import ServerConfig
from dynamic_mcp.models.server_info import ServerInfo
from dynamic_mcp.tool_registry import ToolRegistry

SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]


class ToolServer:
    def __init__(
        self,
        registry: ToolRegistry,
        *,
        server_info: Optional[ServerInfo] = None,
        instruction: Optional[str] = None,
        capabilities: Optional[dict[str, Any]] = None,
    ) -> None:
        self.registry: ToolRegistry = registry
        self.server_info: ServerInfo = server_info or ServerInfo()
        self.instruction: Optional[str] = instruction
        self.capabilities: dict[str, Any] = capabilities or {"tools": {"listChanged": False}}

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        *,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ToolServer":
        return cls(
            ToolRegistry.from_config(config, http_transport=http_transport),
            server_info=config.server_info,
            instruction=config.instruction,
            capabilities=config.server_capabilities,
        )

    def new_dispatcher(self) -> ProtocolDispatcher:
        return ProtocolDispatcher(self)

    def initialize_result(self, requested_version: Any) -> dict[str, Any]:
        if requested_version in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested_version
        else:
            version = LATEST_PROTOCOL_VERSION
        result: dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info.model_dump(exclude_none=True),
        }
        if self.instruction:
            result["instructions"] = self.instruction
        return result

    def list_tools_result(self) -> dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in self.registry.list_tools()]}
