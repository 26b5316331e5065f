"""Pydantic model for command tool metadata."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommandMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = Field(min_length=1)  # executable, used literally
    args: list[str] = Field(default_factory=list)  # templates
    stdin: Optional[str] = None  # template
