"""Executor contract shared by the HTTP and command tool kinds."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from dynamic_mcp.errors import InvocationError, TemplateSyntaxError
from dynamic_mcp.models.tool_definition import ToolDefinition
from dynamic_mcp.models.tool_output import ToolOutput
from dynamic_mcp.schema_validation import SchemaValidator
from dynamic_mcp.templating import Template

logger = logging.getLogger(__name__)


class Executor(ABC):
    """
    Turns one tool definition into a live action.

    ``execute`` validates the input, delegates to ``_invoke`` for the actual
    HTTP call or subprocess, then parses and validates the output. Templates
    and schema validators are built once, in ``__init__``.
    """

    def __init__(self, tool: ToolDefinition, *, timeout: float) -> None:
        self.tool: ToolDefinition = tool
        self.timeout: float = tool.timeout if tool.timeout is not None else timeout
        self._input_validator: SchemaValidator = SchemaValidator(tool.input_schema)
        self._output_validator: SchemaValidator = SchemaValidator(tool.output_schema)

    def _compile(self, text: str, where: str) -> Template:
        try:
            return Template.parse(text)
        except TemplateSyntaxError as exc:
            raise TemplateSyntaxError(f"Tool {self.tool.name!r}, {where}: {exc}") from exc

    async def execute(self, arguments: Any) -> ToolOutput:
        started = time.monotonic()
        try:
            output = await self._execute(arguments)
        except InvocationError as exc:
            logger.warning("Tool %s failed (%s): %s", self.tool.name, exc.kind, exc.message)
            raise
        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info("Tool %s completed in %dms", self.tool.name, duration_ms)
        return output

    async def _execute(self, arguments: Any) -> ToolOutput:
        failure = self._input_validator.validate(arguments)
        if failure is not None:
            raise failure
        raw = await self._invoke(arguments)
        output = ToolOutput.from_text(raw)
        failure = self._output_validator.validate(output.value)
        if failure is not None:
            raise failure.for_stage("output", raw=raw)
        return output

    @abstractmethod
    async def _invoke(self, arguments: Any) -> str:
        """Render the templates, perform the action and return the raw output text."""
        ...
