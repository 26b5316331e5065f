"""Executor for command tools."""

from __future__ import annotations

import logging
import subprocess
from contextlib import suppress
from typing import Any, Optional

import anyio
from anyio.abc import ByteReceiveStream

from dynamic_mcp.errors import ConfigError, ExecutionTimeout, ExecutorFailed
from dynamic_mcp.executors.base import Executor
from dynamic_mcp.models.tool_definition import ToolDefinition
from dynamic_mcp.templating import Template

logger = logging.getLogger(__name__)


async def _drain(stream: Optional[ByteReceiveStream], buffer: bytearray) -> None:
    if stream is None:
        return
    async for chunk in stream:
        buffer.extend(chunk)


class CommandExecutor(Executor):
    def __init__(self, tool: ToolDefinition, *, timeout: float) -> None:
        super().__init__(tool, timeout=timeout)
        metadata = tool.command_metadata
        if metadata is None:
            raise ConfigError(f"Tool {tool.name!r} has no command_metadata.")
        self.command: str = metadata.command
        self._args: list[Template] = [
            self._compile(arg, f"args[{index}]") for index, arg in enumerate(metadata.args)
        ]
        self._stdin: Template | None = self._compile(metadata.stdin, "stdin") if metadata.stdin is not None else None

    async def _invoke(self, arguments: Any) -> str:
        argv = [self.command, *(template.render(arguments) for template in self._args)]
        stdin_data = self._stdin.render(arguments).encode("utf-8") if self._stdin is not None else None

        logger.debug("Spawning %s (tool %s)", argv, self.tool.name)
        try:
            with anyio.fail_after(self.timeout):
                returncode, stdout, stderr = await self._run(argv, stdin_data)
        except TimeoutError:
            raise ExecutionTimeout(self.tool.name, self.timeout) from None

        stderr_text = stderr.decode("utf-8", errors="replace")
        if returncode != 0:
            raise ExecutorFailed(
                f"Command {self.command!r} exited with status {returncode}: {stderr_text.strip()}",
                exit_code=returncode,
                stderr=stderr_text,
            )
        return stdout.decode("utf-8", errors="replace")

    async def _run(self, argv: list[str], stdin_data: bytes | None) -> tuple[int, bytes, bytes]:
        try:
            process = await anyio.open_process(
                argv,
                # Never inherit our own stdin: on the stdio transport it carries the protocol.
                stdin=subprocess.PIPE if stdin_data is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise ExecutorFailed(
                f"Error while spawning {self.command!r}: {exc}",
                cause=f"{type(exc).__name__}: {exc}",
            ) from exc

        stdout = bytearray()
        stderr = bytearray()
        # Leaving this block kills and reaps the child if we were cancelled or timed out.
        async with process:
            async with anyio.create_task_group() as tg:
                tg.start_soon(_drain, process.stdout, stdout)
                tg.start_soon(_drain, process.stderr, stderr)
                if process.stdin is not None and stdin_data is not None:
                    # The child may exit without reading its input.
                    with suppress(anyio.BrokenResourceError, anyio.ClosedResourceError, ConnectionError):
                        await process.stdin.send(stdin_data)
                        await process.stdin.aclose()
                await process.wait()
        return process.returncode or 0, bytes(stdout), bytes(stderr)
