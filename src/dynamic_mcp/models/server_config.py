"""Pydantic model for the configuration file root."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from dynamic_mcp.models.server_info import ServerInfo
from dynamic_mcp.models.tool_definition import ToolDefinition
from dynamic_mcp.models.transport_config import TransportConfig

DEFAULT_EXECUTION_TIMEOUT = 30.0


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    tools: list[ToolDefinition] = Field(default_factory=list)
    instruction: Optional[str] = None
    server_info: ServerInfo = Field(default_factory=ServerInfo)
    server_capabilities: Optional[dict[str, Any]] = None
    transport_config: TransportConfig = Field(default_factory=TransportConfig)
    execution_timeout: float = Field(default=DEFAULT_EXECUTION_TIMEOUT, gt=0)  # seconds, per invocation
