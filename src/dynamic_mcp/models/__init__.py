"""Model types for server configuration and runtime."""

from dynamic_mcp.models.command_metadata import CommandMetadata
from dynamic_mcp.models.http_metadata import HttpMetadata
from dynamic_mcp.models.server_config import ServerConfig
from dynamic_mcp.models.server_info import ServerInfo
from dynamic_mcp.models.sse_config import SseConfig
from dynamic_mcp.models.tool_annotations import ToolAnnotations
from dynamic_mcp.models.tool_definition import ToolDefinition
from dynamic_mcp.models.tool_output import ToolOutput
from dynamic_mcp.models.transport_config import TransportConfig

__all__ = [
    "CommandMetadata",
    "HttpMetadata",
    "ServerConfig",
    "ServerInfo",
    "SseConfig",
    "ToolAnnotations",
    "ToolDefinition",
    "ToolOutput",
    "TransportConfig",
]
