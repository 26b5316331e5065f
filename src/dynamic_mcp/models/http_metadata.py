"""Pydantic model for HTTP tool metadata."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]


class HttpMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str  # template
    method: HttpMethod = "GET"
    headers: dict[str, str] = Field(default_factory=dict)  # header name -> template
    body: Optional[str] = None  # template
