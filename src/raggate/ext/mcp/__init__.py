"""MCP tool exposure (requires ``raggate[mcp]``)."""

from .server import (
    BATCH_QUERY_TOOL,
    QUERY_TOOL,
    STATUS_TOOL,
    RagToolServer,
    create_mcp_server,
    serve_mcp,
)

__all__ = ["BATCH_QUERY_TOOL", "QUERY_TOOL", "STATUS_TOOL", "RagToolServer", "create_mcp_server", "serve_mcp"]
