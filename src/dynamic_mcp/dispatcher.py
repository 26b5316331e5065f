"""MCP request handling for one connection or session."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from dynamic_mcp.errors import (
    INTERNAL_ERROR,
    InvalidParams,
    InvalidRequest,
    InvocationError,
    MethodNotFound,
    ProtocolError,
    ProtocolSequenceError,
    ToolNotFound,
)
from dynamic_mcp.jsonrpc import error_response, success_response
from dynamic_mcp.models.tool_definition import ToolDefinition
from dynamic_mcp.models.tool_output import ToolOutput

if TYPE_CHECKING:
    from dynamic_mcp.server import ToolServer

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


def call_tool_result(tool: ToolDefinition, output: ToolOutput) -> dict[str, Any]:
    result: dict[str, Any] = {
        "content": [{"type": "text", "text": output.as_text()}],
        "isError": False,
    }
    if tool.output_schema is not None and isinstance(output.value, dict):
        result["structuredContent"] = output.value
    return result


class ProtocolDispatcher:
    """
    Protocol state machine: UNINITIALIZED -> READY -> CLOSED.

    ``handle`` takes one decoded JSON-RPC message and returns the response
    envelope, or ``None`` when nothing must be sent back (notifications,
    stray responses, closed session). Every failure is converted into an
    error envelope here; only cancellation propagates.
    """

    def __init__(self, server: "ToolServer") -> None:
        self._server = server
        self._state: SessionState = SessionState.UNINITIALIZED

    @property
    def state(self) -> SessionState:
        return self._state

    def close(self) -> None:
        self._state = SessionState.CLOSED

    async def handle(self, message: Any) -> dict[str, Any] | None:
        if self._state is SessionState.CLOSED:
            logger.debug("Dropping message on closed session: %r", message)
            return None
        if not isinstance(message, dict):
            return self._error(None, InvalidRequest("Expected a JSON-RPC object."))

        request_id = message.get("id")
        method = message.get("method")
        if not isinstance(method, str):
            if "result" in message or "error" in message:
                # A reply to a server-initiated request; we never send any.
                return None
            return self._error(request_id, InvalidRequest("Missing or invalid 'method'."))

        if "id" not in message:
            self._handle_notification(method)
            return None

        try:
            params = message.get("params")
            if params is None:
                params = {}
            if not isinstance(params, dict):
                raise InvalidRequest("'params' must be an object.")
            result = await self._dispatch(method, params)
        except ProtocolError as exc:
            logger.info("Rejected %s: %s", method, exc.message)
            return self._error(request_id, exc)
        except InvocationError as exc:
            return error_response(request_id, exc.code, exc.message, exc.to_data())
        except Exception:
            logger.exception("Unexpected error while handling %s", method)
            return error_response(request_id, INTERNAL_ERROR, "Internal error", {"kind": "InternalError"})
        return success_response(request_id, result)

    def _error(self, request_id: Any, exc: ProtocolError) -> dict[str, Any]:
        return error_response(request_id, exc.code, exc.message, {"kind": exc.kind})

    def _handle_notification(self, method: str) -> None:
        if method == "notifications/initialized":
            logger.debug("Client reported initialized")
        else:
            logger.debug("Ignoring notification %s", method)

    async def _dispatch(self, method: str, params: dict[str, Any]) -> Any:
        if self._state is SessionState.UNINITIALIZED:
            if method != "initialize":
                raise ProtocolSequenceError(f"Received {method!r} before initialize.")
            result = self._server.initialize_result(params.get("protocolVersion"))
            self._state = SessionState.READY
            client_info = params.get("clientInfo")
            logger.info("Session initialized (client %s, protocol %s)", client_info, result["protocolVersion"])
            return result

        if method == "initialize":
            raise ProtocolSequenceError("Session is already initialized.")
        if method == "ping":
            return {}
        if method == "tools/list":
            return self._server.list_tools_result()
        if method == "tools/call":
            return await self._call_tool(params)
        raise MethodNotFound(f"Unknown method: {method!r}")

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParams("tools/call requires a tool 'name'.")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        registry = self._server.registry
        tool = registry.lookup(name)
        if tool is None:
            raise ToolNotFound(f"Unknown tool: {name!r}. Available: {[t.name for t in registry.list_tools()]}")
        output = await registry.executor(name).execute(arguments)
        return call_tool_result(tool, output)
