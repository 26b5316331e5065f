"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from dynamic_mcp.config_loader import load_config
from dynamic_mcp.errors import ConfigError
from dynamic_mcp.models.transport_config import TransportConfig
from dynamic_mcp.server import ToolServer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynamic-mcp",
        description="Serve HTTP and command tools declared in a YAML file over MCP.",
    )
    parser.add_argument("-f", "--file_path", type=str, required=True, help="Path to the YAML configuration")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (logs go to stderr)",
    )
    return parser


def run_transport(server: ToolServer, transport_config: TransportConfig) -> None:
    if transport_config.transport_type == "SSE" and transport_config.sse_config is not None:
        from dynamic_mcp.transports.sse import SseTransport

        SseTransport(server, transport_config.sse_config).serve_forever()
        return

    from dynamic_mcp.transports.stdio import StdioTransport

    StdioTransport(server).run()


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    # stdout carries the protocol on the stdio transport.
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(Path(args.file_path))
        server = ToolServer.from_config(config)
    except ConfigError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    logger.info(
        "Starting %s %s with %d tools (%s transport)",
        server.server_info.name,
        server.server_info.version,
        len(server.registry),
        config.transport_config.transport_type,
    )
    run_transport(server, config.transport_config)
