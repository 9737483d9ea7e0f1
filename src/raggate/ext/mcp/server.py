"""MCP server exposing the RAG tools to MCP clients (FastMCP).

Registers three tools backed by the gateway's ``RagInvoker``:
- query_with_agentic_rag(query)
- batch_query_with_agentic_rag(queries)
- get_agentic_rag_status()

Each tool returns text, never raises for backend trouble, and so is safe to
hand to an AI reasoning loop.

Example:
    >>> from raggate.ext.mcp import serve_mcp
    >>> serve_mcp(transport="sse", port=8080)

Requires: pip install raggate[mcp]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from raggate.gateway import Gateway
from raggate.runtime.observability import get_logger

if TYPE_CHECKING:
    from fastmcp import FastMCP

log = get_logger(__name__)

Transport = Literal["stdio", "sse", "streamable-http"]

QUERY_TOOL = "query_with_agentic_rag"
BATCH_QUERY_TOOL = "batch_query_with_agentic_rag"
STATUS_TOOL = "get_agentic_rag_status"


class RagToolServer:
    """FastMCP server wrapping a gateway's RAG tools.

    Example:
        >>> server = RagToolServer(Gateway(), name="agentic-rag")
        >>> server.run(transport="stdio")
    """

    __slots__ = ("_name", "_gateway", "_mcp")

    def __init__(self, gateway: Gateway | None = None, name: str | None = None) -> None:
        self._gateway = gateway or Gateway()
        self._name = name or self._gateway.settings.server.name
        self._mcp = self._create_server()

    @property
    def gateway(self) -> Gateway:
        return self._gateway

    @property
    def name(self) -> str:
        return self._name

    @property
    def fastmcp(self) -> FastMCP:
        """Underlying FastMCP instance."""
        return self._mcp

    def _create_server(self) -> FastMCP:
        try:
            from fastmcp import FastMCP
        except ImportError as e:
            raise ImportError(
                "MCP integration requires fastmcp. "
                "Install with: pip install raggate[mcp]"
            ) from e

        mcp = FastMCP(self._name)
        invoker = self._gateway.invoker

        @mcp.tool(name=QUERY_TOOL, description="Query the AgenticRag service for an answer")
        async def query_with_agentic_rag(query: str) -> str:
            return await invoker.query(query)

        @mcp.tool(name=BATCH_QUERY_TOOL, description="Run several queries against the AgenticRag service in order")
        async def batch_query_with_agentic_rag(queries: list[str]) -> str:
            return await invoker.batch_query(queries)

        @mcp.tool(name=STATUS_TOOL, description="Check whether the AgenticRag service is available")
        async def get_agentic_rag_status() -> str:
            return await invoker.health_check()

        log.info("mcp tools registered", server=self._name, tools=[QUERY_TOOL, BATCH_QUERY_TOOL, STATUS_TOOL])
        return mcp

    def run(
        self,
        transport: Transport = "stdio",
        *,
        host: str = "127.0.0.1",
        port: int = 8080,
    ) -> None:
        """Start the MCP server (blocking).

        Args:
            transport: "stdio" (CLI), "sse" (HTTP), "streamable-http"
            host: Host for HTTP transports
            port: Port for HTTP transports
        """
        if transport == "stdio":
            self._mcp.run()
        else:
            self._mcp.run(transport=transport, host=host, port=port)


def create_mcp_server(gateway: Gateway | None = None, name: str | None = None) -> RagToolServer:
    """Create the MCP server without starting it."""
    return RagToolServer(gateway, name)


def serve_mcp(
    gateway: Gateway | None = None,
    *,
    name: str | None = None,
    transport: Transport = "stdio",
    host: str = "127.0.0.1",
    port: int = 8080,
) -> None:
    """Expose the RAG tools over MCP (Cursor, Claude Desktop, agent frameworks)."""
    RagToolServer(gateway, name).run(transport=transport, host=host, port=port)
