"""Public package exports."""

from dynamic_mcp.config_loader import load_config
from dynamic_mcp.dispatcher import ProtocolDispatcher
from dynamic_mcp.dispatcher import SessionState
from dynamic_mcp.executors import CommandExecutor
from dynamic_mcp.executors import Executor
from dynamic_mcp.executors import HttpExecutor
from dynamic_mcp.models.server_info import DEFAULT_SERVER_VERSION as __version__
from dynamic_mcp.server import ToolServer
from dynamic_mcp.templating import render
from dynamic_mcp.tool_registry import ToolRegistry

__all__ = [
    "CommandExecutor",
    "Executor",
    "HttpExecutor",
    "ProtocolDispatcher",
    "SessionState",
    "ToolRegistry",
    "ToolServer",
    "__version__",
    "load_config",
    "render",
]
