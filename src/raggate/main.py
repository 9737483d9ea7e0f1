"""Command-line entry point.

    raggate                      # HTTP gateway on RAGGATE_SERVER_HOST:RAGGATE_SERVER_PORT
    raggate --port 9000
    raggate --mcp stdio          # RAG tools over MCP instead of HTTP
    python -m raggate --mcp sse --port 8080
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from raggate.foundation.config import get_settings
from raggate.gateway import Gateway
from raggate.runtime.observability import configure_logging


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="raggate", description="Gateway between AI tool calls and a RAG engine")
    p.add_argument("--host", default=None, help="bind address (default from settings)")
    p.add_argument("--port", type=int, default=None, help="bind port (default from settings)")
    p.add_argument("--mcp", choices=["stdio", "sse", "streamable-http"], default=None,
                   help="serve the RAG tools over MCP with this transport")
    return p


def serve(argv: Sequence[str] | None = None) -> None:
    args = _parser().parse_args(argv)
    settings = get_settings()
    configure_logging(format=settings.logging.format, level=settings.logging.level)
    gateway = Gateway(settings)

    if args.mcp is not None:
        from raggate.ext.mcp import serve_mcp
        serve_mcp(
            gateway,
            transport=args.mcp,
            host=args.host or settings.server.host,
            port=args.port or settings.server.port,
        )
        return

    from raggate.ext.http import serve_http
    serve_http(gateway, host=args.host, port=args.port)


if __name__ == "__main__":
    serve()
