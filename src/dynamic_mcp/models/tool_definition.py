"""Pydantic model for a declared tool."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from dynamic_mcp.models.command_metadata import CommandMetadata
from dynamic_mcp.models.http_metadata import HttpMetadata
from dynamic_mcp.models.tool_annotations import ToolAnnotations

ToolKind = Literal["HTTP", "COMMAND"]

_METADATA_FIELD: dict[str, str] = {"HTTP": "http_metadata", "COMMAND": "command_metadata"}


class ToolDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    description: str = ""
    kind: ToolKind = Field(validation_alias=AliasChoices("kind", "tool_type"))
    input_schema: Optional[dict[str, Any]] = None
    output_schema: Optional[dict[str, Any]] = None
    http_metadata: Optional[HttpMetadata] = None
    command_metadata: Optional[CommandMetadata] = None
    annotations: Optional[ToolAnnotations] = Field(
        default=None,
        validation_alias=AliasChoices("annotations", "tool_annotations"),
    )
    timeout: Optional[float] = Field(default=None, gt=0)  # seconds

    @model_validator(mode="before")
    @classmethod
    def _lift_schemas_from_metadata(cls, data: Any) -> Any:
        # Older configs declare the schemas inside the metadata block.
        if not isinstance(data, dict):
            return data
        lifted = dict(data)
        for block_name in _METADATA_FIELD.values():
            block = lifted.get(block_name)
            if not isinstance(block, dict):
                continue
            for schema_key in ("input_schema", "output_schema"):
                if schema_key in block and lifted.get(schema_key) is None:
                    lifted[schema_key] = block[schema_key]
        return lifted

    @model_validator(mode="after")
    def _check_metadata_matches_kind(self) -> "ToolDefinition":
        expected = _METADATA_FIELD[self.kind]
        for kind, field_name in _METADATA_FIELD.items():
            present = getattr(self, field_name) is not None
            if field_name == expected and not present:
                raise ValueError(f"Tool {self.name!r} of kind {self.kind} requires {field_name}.")
            if field_name != expected and present:
                raise ValueError(f"Tool {self.name!r} of kind {self.kind} must not declare {field_name} ({kind} only).")
        return self

    def to_wire(self) -> dict[str, Any]:
        """Tool description as advertised by tools/list."""
        tool: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema if self.input_schema is not None else {"type": "object"},
        }
        if self.output_schema is not None:
            tool["outputSchema"] = self.output_schema
        if self.annotations is not None:
            tool["annotations"] = self.annotations.to_wire()
        return tool
