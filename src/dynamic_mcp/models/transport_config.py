"""Pydantic model for transport selection."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from dynamic_mcp.models.sse_config import SseConfig

TransportType = Literal["STDIO", "SSE"]


class TransportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    transport_type: TransportType = "STDIO"
    sse_config: Optional[SseConfig] = None

    @model_validator(mode="after")
    def _require_sse_config(self) -> "TransportConfig":
        if self.transport_type == "SSE" and self.sse_config is None:
            raise ValueError("sse_config is required when transport_type is SSE.")
        return self
