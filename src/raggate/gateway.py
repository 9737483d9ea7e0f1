"""Gateway façade: the operations behind the HTTP endpoints.

Wires requests to the profile registry, the RAG invoker and the streaming
responder, and shapes results as JSON-ready dicts. Holds no state of its own
beyond the components it owns.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Awaitable, Callable

from raggate.foundation.config import GatewaySettings, get_settings
from raggate.foundation.errors import ErrorCode, GatewayError, ProfileValidationError
from raggate.io.streaming import StreamingResponder
from raggate.registry import (
    STATUS_CONFIGURED,
    STATUS_FAILED,
    STATUS_NOT_CONFIGURED,
    ProfileRegistry,
    ServerProfile,
)
from raggate.runtime.observability import get_logger
from raggate.tools import RagInvoker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

log = get_logger(__name__)

Answerer = Callable[[str, ServerProfile | None], Awaitable[str]]

SERVICE_NAME = "MCP Client Service"
CONFIGURE_FAILED_MESSAGE = "Configuration failed"
REMOVED_MESSAGE = "Server configuration removed"
QUERY_METHOD = "MCP tool call"


def _now_ms() -> int:
    return int(time.time() * 1000)


class Gateway:
    """Composition root for the gateway operations.

    Args:
        settings: Gateway settings; defaults to ``get_settings()``
        registry: Profile registry (a fresh one by default)
        invoker: RAG invoker (built from ``settings.rag`` by default)
        responder: Streaming responder (built from ``settings.stream`` by default)
        answer: ``async (prompt, profile) -> text`` used by query and chat.
            Defaults to the RAG query tool; plug a chat model in here.

    Example:
        >>> gateway = Gateway()
        >>> body, ok = gateway.configure_server({"serverName": "svc1", "transportType": "SSE",
        ...                                      "sseConfig": {"url": "http://x", "timeoutSeconds": 5}})
        >>> body["status"]
        'CONNECTED'
    """

    __slots__ = ("_settings", "_registry", "_invoker", "_responder", "_answer")

    def __init__(
        self,
        settings: GatewaySettings | None = None,
        *,
        registry: ProfileRegistry | None = None,
        invoker: RagInvoker | None = None,
        responder: StreamingResponder | None = None,
        answer: Answerer | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._registry = registry or ProfileRegistry()
        self._invoker = invoker or RagInvoker(self._settings.rag)
        self._responder = responder or StreamingResponder(
            self._settings.stream.token_delay, self._settings.stream.frame_delay,
        )
        self._answer: Answerer = answer or self._invoker.query

    @property
    def settings(self) -> GatewaySettings:
        return self._settings

    @property
    def registry(self) -> ProfileRegistry:
        return self._registry

    @property
    def invoker(self) -> RagInvoker:
        return self._invoker

    @property
    def responder(self) -> StreamingResponder:
        return self._responder

    async def aclose(self) -> None:
        await self._invoker.aclose()

    # ─────────────────────────────────────────────────────────────────
    # Server profiles
    # ─────────────────────────────────────────────────────────────────

    def configure_server(self, payload: dict[str, object] | ServerProfile) -> tuple[dict[str, object], bool]:
        """Register a profile. Returns (response body, success)."""
        try:
            profile = payload if isinstance(payload, ServerProfile) else ServerProfile.from_payload(payload)
        except ProfileValidationError as e:
            log.warning("server configuration rejected", server=e.server_name, reason=e.message)
            return self._configure_failure(e), False

        return self._registry.register(profile).match(
            ok=lambda c: ({
                "success": True,
                "serverName": c.name,
                "message": c.message,
                "status": c.status,
            }, True),
            err=lambda e: (self._configure_failure(e), False),
        )

    @staticmethod
    def _configure_failure(e: ProfileValidationError) -> dict[str, object]:
        return {
            "success": False,
            "serverName": e.server_name,
            "message": CONFIGURE_FAILED_MESSAGE,
            "status": STATUS_FAILED,
            "errorDetail": e.message,
        }

    def list_servers(self) -> dict[str, str]:
        return self._registry.list_all()

    def get_server(self, name: str) -> dict[str, object] | None:
        profile = self._registry.get(name)
        return profile.to_payload() if profile is not None else None

    def remove_server(self, name: str) -> dict[str, object] | None:
        """Removal body, or None when no such profile exists."""
        if not self._registry.remove(name):
            return None
        return {"serverName": name, "removed": True, "message": REMOVED_MESSAGE}

    def server_status(self, name: str) -> dict[str, object]:
        configured = self._registry.contains(name)
        return {
            "serverName": name,
            "configured": configured,
            "status": STATUS_CONFIGURED if configured else STATUS_NOT_CONFIGURED,
        }

    def health(self) -> dict[str, object]:
        return {
            "status": "UP",
            "service": SERVICE_NAME,
            "configuredServers": self._registry.count(),
            "timestamp": _now_ms(),
        }

    # ─────────────────────────────────────────────────────────────────
    # Query & chat
    # ─────────────────────────────────────────────────────────────────

    def _profile_for(self, server: str | None) -> ServerProfile | None:
        if server is None:
            return None
        profile = self._registry.get(server)
        if profile is None:
            raise GatewayError(f"Server '{server}' is not configured", code=ErrorCode.NOT_FOUND)
        return profile

    async def invoke_query(self, query: str, server: str | None = None) -> tuple[dict[str, object], bool]:
        """Answer one query. Backend trouble arrives as sentinel text inside ``response``.

        ``success`` is False only when the call could not be made at all
        (configuration error, unknown server, failing answerer).
        """
        log.info("query received", query=query, server=server)
        try:
            response = await self._answer(query, self._profile_for(server))
        except Exception as e:
            log.exception("query invocation failed", query=query, error=str(e))
            return {"query": query, "success": False, "error": str(e), "timestamp": _now_ms()}, False
        return {
            "query": query,
            "success": True,
            "response": response,
            "timestamp": _now_ms(),
            "method": QUERY_METHOD,
        }, True

    def stream_chat(self, prompt: str, server: str | None = None) -> AsyncIterator[str]:
        """Framed chunks for a chat answer; errors are reported in-band."""
        log.info("stream chat received", prompt=prompt, server=server)

        async def produce() -> str:
            return await self._answer(prompt, self._profile_for(server))

        return self._responder.stream(produce)
