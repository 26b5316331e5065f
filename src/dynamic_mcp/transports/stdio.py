"""Newline-delimited JSON-RPC over standard input and output."""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING, Any, Optional, TextIO

import anyio

from dynamic_mcp.jsonrpc import decode, encode, parse_error_response

if TYPE_CHECKING:
    from dynamic_mcp.server import ToolServer

logger = logging.getLogger(__name__)


class StdioTransport:
    """
    Single session, strictly sequential: a request is fully handled (tool
    call included) and its response written before the next line is read.

    Input is read as bytes (the ``buffer`` of a text stream when it has one)
    and decoded per line, so a line that is not UTF-8 only costs that line.
    """

    def __init__(
        self,
        server: "ToolServer",
        stdin: Optional[IO[Any]] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self._server = server
        self._stdin: IO[Any] = stdin if stdin is not None else sys.stdin
        self._stdout: TextIO = stdout if stdout is not None else sys.stdout

    def run(self) -> None:
        anyio.run(self.serve)

    async def serve(self) -> None:
        dispatcher = self._server.new_dispatcher()
        reader = anyio.wrap_file(getattr(self._stdin, "buffer", self._stdin))
        writer = anyio.wrap_file(self._stdout)
        logger.info("Serving %d tools over stdio", len(self._server.registry))
        try:
            async for line in reader:
                if not line.strip():
                    continue
                try:
                    text = line.decode("utf-8") if isinstance(line, bytes) else line
                    message = decode(text.strip())
                except ValueError as exc:
                    # UnicodeDecodeError included.
                    logger.warning("Unparsable line on stdin: %s", exc)
                    response = parse_error_response(exc)
                else:
                    response = await dispatcher.handle(message)
                if response is not None:
                    await writer.write(encode(response) + "\n")
                    await writer.flush()
        finally:
            dispatcher.close()
        logger.info("stdin closed, stopping")
