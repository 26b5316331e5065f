"""Executor for HTTP tools."""

from __future__ import annotations

import logging
from typing import Any, Optional

import anyio
import httpx

from dynamic_mcp.errors import ConfigError, ExecutorFailed
from dynamic_mcp.executors.base import Executor
from dynamic_mcp.models.tool_definition import ToolDefinition
from dynamic_mcp.templating import Template

logger = logging.getLogger(__name__)


class HttpExecutor(Executor):
    def __init__(
        self,
        tool: ToolDefinition,
        *,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(tool, timeout=timeout)
        metadata = tool.http_metadata
        if metadata is None:
            raise ConfigError(f"Tool {tool.name!r} has no http_metadata.")
        self.method: str = metadata.method
        self._url: Template = self._compile(metadata.url, "url")
        self._headers: dict[str, Template] = {
            name: self._compile(value, f"header {name}") for name, value in metadata.headers.items()
        }
        self._body: Template | None = self._compile(metadata.body, "body") if metadata.body is not None else None
        self._transport: Optional[httpx.AsyncBaseTransport] = transport

    async def _invoke(self, arguments: Any) -> str:
        url = self._url.render(arguments)
        headers = {name: template.render(arguments) for name, template in self._headers.items()}
        body = self._body.render(arguments) if self._body is not None else None

        logger.debug("%s %s (tool %s)", self.method, url, self.tool.name)
        try:
            # httpx bounds each connect/read/write step; this bounds the whole exchange.
            with anyio.fail_after(self.timeout):
                async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                    response = await client.request(
                        self.method,
                        url,
                        headers=headers,
                        content=body.encode("utf-8") if body is not None else None,
                    )
        except TimeoutError as exc:
            raise ExecutorFailed(
                f"Request to {url} did not complete within {self.timeout:g}s",
                cause=f"Timeout: no complete response after {self.timeout:g}s",
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise ExecutorFailed(
                f"Error while sending a request to {url}: {exc!s}",
                cause=f"{type(exc).__name__}: {exc!s}",
            ) from exc

        if not response.is_success:
            raise ExecutorFailed(
                f"Request to {url} returned status {response.status_code}",
                cause=response.text,
                status_code=response.status_code,
            )
        return response.text
