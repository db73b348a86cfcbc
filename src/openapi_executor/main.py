"""Command line entry point: serve an OpenAPI document as MCP tools."""

from __future__ import annotations

import argparse
import asyncio
from typing import Any, Dict, List, Optional

import uvicorn

from .config import Settings, get_settings
from .logging import configure_logging
from .server import build_server

_HTTP_TRANSPORTS = {"http", "streamable-http", "streamablehttp"}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="openapi-executor",
        description="Expose every operation of an OpenAPI document as an MCP tool",
    )
    parser.add_argument("--spec-url", help="URL of the OpenAPI document")
    parser.add_argument(
        "--base-url", help="Server URL used instead of the document's first server"
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "streamable-http"],
        help="MCP transport (default: from settings)",
    )
    parser.add_argument("--host", help="Bind address for HTTP transports")
    parser.add_argument("--port", type=int, help="Port for HTTP transports")
    parser.add_argument(
        "--operations",
        help="Comma-separated operation ids to expose (default: all)",
    )
    parser.add_argument("--log-level", help="Logging level, e.g. DEBUG")
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with every option given on the command line applied."""
    options = {
        "spec_url": args.spec_url,
        "base_url_override": args.base_url,
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
        "operation_allowlist": args.operations,
        "log_level": args.log_level,
    }
    update: Dict[str, Any] = {key: value for key, value in options.items() if value is not None}
    if not update:
        return settings
    return settings.model_copy(update=update)


async def serve(settings: Settings) -> None:
    configure_logging(settings.log_level)
    if not settings.spec_url:
        raise SystemExit(
            "No OpenAPI document configured: pass --spec-url or set OPENAPI_EXECUTOR_SPEC_URL"
        )

    mcp, app = await build_server(settings)
    transport = settings.transport.lower()
    if transport not in _HTTP_TRANSPORTS:
        await mcp.run_stdio_async()
        return
    if not app:
        raise RuntimeError(f"HTTP app unavailable for transport={transport}")
    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port))
    await server.serve()


def main(argv: Optional[List[str]] = None) -> None:
    settings = apply_overrides(get_settings(), parse_args(argv))
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
