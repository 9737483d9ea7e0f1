"""raggate - gateway between an AI tool-calling layer and a RAG engine.

Keeps named server connection profiles, calls the RAG engine as a tool with
a bounded wait and a text fallback, and streams answers back as paced chunks.

Quick Start:
    >>> from raggate import Gateway
    >>> gateway = Gateway()
    >>> gateway.configure_server({
    ...     "serverName": "svc1",
    ...     "transportType": "SSE",
    ...     "sseConfig": {"url": "http://rag:8080", "timeoutSeconds": 5},
    ... })
    ({'success': True, 'serverName': 'svc1', 'message': 'MCP server configured', 'status': 'CONNECTED'}, True)
    >>> await gateway.invoke_query("what is MCP?", server="svc1")

Tool invoker on its own:
    >>> from raggate import RagInvoker, RagSettings
    >>> async with RagInvoker(RagSettings(base_url="http://rag:8080", timeout=10)) as rag:
    ...     await rag.query("what is MCP?")   # answer text or 'AgenticRag服务调用失败'

HTTP endpoints:
    >>> from raggate.ext.http import create_app
    >>> app = create_app(gateway)

MCP tools:
    >>> from raggate.ext.mcp import serve_mcp
    >>> serve_mcp(gateway, transport="stdio")
"""

from __future__ import annotations

__version__ = "0.1.0"

from .foundation.config import GatewaySettings, RagSettings, StreamSettings, get_settings
from .foundation.errors import (
    ConfigurationError,
    Err,
    ErrorCode,
    GatewayError,
    Ok,
    ProfileValidationError,
    Result,
)
from .gateway import Gateway
from .io.streaming import (
    DONE_MARKER,
    ERROR_MARKER,
    START_NOTICE,
    SSEAdapter,
    StreamingResponder,
    StreamSession,
    StreamState,
)
from .registry import (
    Confirmation,
    ProfileRegistry,
    ServerProfile,
    SseParams,
    StdioParams,
    TransportKind,
)
from .runtime.observability import configure_logging, get_logger
from .tools import (
    QUERY_FAILED_SENTINEL,
    SERVICE_UNAVAILABLE_SENTINEL,
    Fallback,
    FallbackReason,
    InvocationResult,
    RagInvoker,
)

__all__ = [
    "__version__",
    # Config
    "GatewaySettings", "RagSettings", "StreamSettings", "get_settings",
    # Errors
    "ConfigurationError", "Err", "ErrorCode", "GatewayError", "Ok", "ProfileValidationError", "Result",
    # Gateway
    "Gateway",
    # Streaming
    "DONE_MARKER", "ERROR_MARKER", "START_NOTICE", "SSEAdapter", "StreamingResponder",
    "StreamSession", "StreamState",
    # Registry
    "Confirmation", "ProfileRegistry", "ServerProfile", "SseParams", "StdioParams", "TransportKind",
    # Logging
    "configure_logging", "get_logger",
    # Tools
    "QUERY_FAILED_SENTINEL", "SERVICE_UNAVAILABLE_SENTINEL", "Fallback", "FallbackReason",
    "InvocationResult", "RagInvoker",
]
