"""Transports feeding the protocol dispatcher."""

from dynamic_mcp.transports.sse import SseSession, SseTransport
from dynamic_mcp.transports.stdio import StdioTransport

__all__ = ["SseSession", "SseTransport", "StdioTransport"]
