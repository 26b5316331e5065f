"""Error taxonomy for configuration, tool invocation and protocol handling."""

from __future__ import annotations

from typing import Any

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class DynamicMCPError(Exception):
    """Base exception for the package."""


class ConfigError(DynamicMCPError):
    """Raised when the configuration cannot be loaded. Fatal at start-up."""


class TemplateSyntaxError(ConfigError):
    """Raised when a template string cannot be parsed."""


class InvocationError(DynamicMCPError):
    """Base exception for failures scoped to a single tool invocation."""

    kind: str = "InvocationError"
    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_data(self) -> dict[str, Any]:
        return {"kind": self.kind}


class RenderError(InvocationError):
    kind = "RenderError"
    code = INVALID_PARAMS

    def __init__(self, expression: str, path: str, reason: str) -> None:
        super().__init__(f"Cannot resolve {expression!r}: {reason} at {path}")
        self.expression = expression
        self.path = path
        self.reason = reason

    def to_data(self) -> dict[str, Any]:
        return {"kind": self.kind, "expression": self.expression, "path": self.path}


class SchemaValidationFailed(InvocationError):
    kind = "SchemaValidationFailed"

    def __init__(
        self,
        path: str,
        expected: str,
        actual: str,
        message: str,
        *,
        stage: str = "input",
        raw: str | None = None,
    ) -> None:
        super().__init__(f"{stage} validation failed at {path}: {message}")
        self.path = path
        self.expected = expected
        self.actual = actual
        self.detail = message
        self.stage = stage
        self.raw = raw

    @property
    def code(self) -> int:  # type: ignore[override]
        return INVALID_PARAMS if self.stage == "input" else INTERNAL_ERROR

    def for_stage(self, stage: str, raw: str | None = None) -> "SchemaValidationFailed":
        return SchemaValidationFailed(
            self.path,
            self.expected,
            self.actual,
            self.detail,
            stage=stage,
            raw=raw,
        )

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "stage": self.stage,
            "path": self.path,
            "expected": self.expected,
            "actual": self.actual,
        }
        if self.raw is not None:
            data["raw"] = self.raw
        return data


class ExecutorFailed(InvocationError):
    kind = "ExecutorFailed"

    def __init__(
        self,
        message: str,
        *,
        cause: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.exit_code = exit_code
        self.stderr = stderr
        self.status_code = status_code

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind}
        if self.cause is not None:
            data["cause"] = self.cause
        if self.exit_code is not None:
            data["exit_code"] = self.exit_code
        if self.stderr is not None:
            data["stderr"] = self.stderr
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class ExecutionTimeout(InvocationError):
    kind = "Timeout"

    def __init__(self, tool_name: str, timeout: float) -> None:
        super().__init__(f"Tool {tool_name!r} timed out after {timeout:g}s")
        self.timeout = timeout

    def to_data(self) -> dict[str, Any]:
        return {"kind": self.kind, "timeout": self.timeout}


class ProtocolError(DynamicMCPError):
    """Dispatcher-level failure reported as a JSON-RPC error response."""

    kind: str = "ProtocolError"
    code: int = INVALID_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ToolNotFound(ProtocolError):
    kind = "ToolNotFound"
    code = INVALID_PARAMS


class ProtocolSequenceError(ProtocolError):
    kind = "ProtocolSequenceError"
    code = INVALID_REQUEST


class MethodNotFound(ProtocolError):
    kind = "MethodNotFound"
    code = METHOD_NOT_FOUND


class InvalidRequest(ProtocolError):
    kind = "InvalidRequest"
    code = INVALID_REQUEST


class InvalidParams(ProtocolError):
    kind = "InvalidParams"
    code = INVALID_PARAMS
