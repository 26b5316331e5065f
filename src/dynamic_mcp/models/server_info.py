"""Pydantic model for the server identity reported on initialize."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_SERVER_NAME = "dynamic-mcp"
DEFAULT_SERVER_VERSION = "0.1.0"


class ServerInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = DEFAULT_SERVER_NAME
    version: str = DEFAULT_SERVER_VERSION
    title: Optional[str] = None
