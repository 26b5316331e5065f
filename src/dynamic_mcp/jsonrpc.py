"""JSON-RPC 2.0 envelopes."""

from __future__ import annotations

import json
from typing import Any

from dynamic_mcp.errors import PARSE_ERROR

RequestId = int | str | None


def success_response(request_id: RequestId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def error_response(
    request_id: RequestId,
    code: int,
    message: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}


def parse_error_response(exc: Exception) -> dict[str, Any]:
    return error_response(None, PARSE_ERROR, f"Parse error: {exc}", {"kind": "ParseError"})


def encode(message: dict[str, Any]) -> str:
    """Serialize to a single line (no embedded newlines)."""
    return json.dumps(message, ensure_ascii=False, separators=(",", ":"))


def decode(text: str | bytes) -> Any:
    return json.loads(text)
