"""Successful result of a tool invocation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ToolOutput:
    value: Any  # parsed JSON, or the raw text when it does not parse
    raw: str
    is_json: bool

    @classmethod
    def from_text(cls, raw: str) -> "ToolOutput":
        try:
            return cls(value=json.loads(raw), raw=raw, is_json=True)
        except ValueError:
            return cls(value=raw, raw=raw, is_json=False)

    def as_text(self) -> str:
        if self.is_json:
            return json.dumps(self.value, ensure_ascii=False, separators=(",", ":"))
        return self.raw
