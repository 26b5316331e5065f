"""Pydantic model for the SSE transport settings."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

DEFAULT_SSE_PATH = "/sse"
DEFAULT_POST_PATH = "/message"
DEFAULT_KEEP_ALIVE_SECONDS = 15.0

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d)?\s*$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, "d": 86400.0}


def parse_duration(value: Any) -> float:
    """
    Converts "500ms", "15s", "2m", "1h" or a bare number of seconds to seconds.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        seconds = float(match.group(1)) * _UNIT_SECONDS[match.group(2) or "s"]
    else:
        raise ValueError(f"Invalid duration: {value!r}")
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


def split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Expected address as host:port, got {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    port_number = int(port)
    if port_number > 65535:
        raise ValueError(f"Port out of range in {address!r}")
    return host, port_number


class SseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    sse_path: str = DEFAULT_SSE_PATH
    post_path: str = DEFAULT_POST_PATH
    keep_alive_duration: float = DEFAULT_KEEP_ALIVE_SECONDS  # seconds

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        split_address(value)
        return value

    @field_validator("sse_path", "post_path", mode="before")
    @classmethod
    def _default_paths(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return DEFAULT_SSE_PATH if info.field_name == "sse_path" else DEFAULT_POST_PATH
        if isinstance(value, str) and not value.startswith("/"):
            raise ValueError(f"{info.field_name} must start with '/', got {value!r}")
        return value

    @field_validator("keep_alive_duration", mode="before")
    @classmethod
    def _parse_keep_alive(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_KEEP_ALIVE_SECONDS
        return parse_duration(value)

    @property
    def host(self) -> str:
        return split_address(self.address)[0]

    @property
    def port(self) -> int:
        return split_address(self.address)[1]
