"""RAG tools - call the AgenticRag engine on behalf of an AI tool-calling loop.

The engine is an opaque HTTP service:
    GET {base}/query?q=<text>   -> answer text (often JSON, treated as text)
    GET {base}/health           -> liveness text

Tool calls inside a reasoning loop must always hand back text, so backend
trouble (non-2xx, refused connection, timeout) never raises. It comes back as
``Err(Fallback)`` from the ``*_result`` methods and as a fixed sentinel string
from the text methods. Only a broken deployment (malformed base URL, a profile
that cannot be reached over HTTP) raises ``ConfigurationError``.

Example:
    >>> async with RagInvoker(RagSettings(base_url="http://rag:8080")) as rag:
    ...     await rag.query("what is MCP?")
    ...     await rag.batch_query(["a", "b"])
    ...     await rag.health_check()
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from urllib.parse import urlsplit

import httpx

from raggate.foundation.config import RagSettings
from raggate.foundation.errors import ConfigurationError, Err, Ok, Result, describe_exception
from raggate.registry.profiles import ServerProfile, TransportKind
from raggate.runtime.observability import get_logger

log = get_logger(__name__)

QUERY_FAILED_SENTINEL = "AgenticRag服务调用失败"
SERVICE_UNAVAILABLE_SENTINEL = "服务不可用"
HEALTH_REPORT_TEMPLATE = "AgenticRag服务状态: {status}"
BATCH_ITEM_TEMPLATE = "query {index}: {query}\nresult: {result}\n\n"


class FallbackReason(StrEnum):
    """Why a backend call produced a sentinel instead of a body."""
    QUERY_FAILED = "QUERY_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_SENTINELS: dict[FallbackReason, str] = {
    FallbackReason.QUERY_FAILED: QUERY_FAILED_SENTINEL,
    FallbackReason.SERVICE_UNAVAILABLE: SERVICE_UNAVAILABLE_SENTINEL,
}


@dataclass(frozen=True, slots=True)
class Fallback:
    """A failed backend call: the sentinel cause plus what actually went wrong."""

    reason: FallbackReason
    cause: str

    @property
    def sentinel(self) -> str:
        return _SENTINELS[self.reason]

    def __str__(self) -> str:
        return self.sentinel


InvocationResult = Result[str, Fallback]


def to_text(result: InvocationResult) -> str:
    """Body on success, fixed sentinel on failure."""
    return result.unwrap_or_else(lambda f: f.sentinel)


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Resolved call target: base URL, timeout and extra headers."""

    base_url: str
    timeout: float
    headers: dict[str, str] = field(default_factory=dict)

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def _check_base_url(base_url: str) -> str:
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"RAG base URL must be an absolute http(s) URL, got {base_url!r}")
    try:
        httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Malformed RAG base URL {base_url!r}: {e}") from e
    return base_url


class RagInvoker:
    """Calls the RAG engine with a bounded wait and a defined fallback.

    Args:
        settings: Base URL and timeout used when no profile is given
        client: Optional shared ``httpx.AsyncClient``; one is created lazily otherwise
            and closed by ``aclose()``. An injected client is left open.
    """

    __slots__ = ("_settings", "_client", "_owns_client")

    def __init__(self, settings: RagSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings or RagSettings()
        self._client = client
        self._owns_client = client is None

    @property
    def settings(self) -> RagSettings:
        return self._settings

    # ─────────────────────────────────────────────────────────────────
    # Target resolution
    # ─────────────────────────────────────────────────────────────────

    def resolve(self, profile: ServerProfile | None = None) -> Endpoint:
        """Pick base URL, timeout and headers for a call.

        An SSE profile overrides the configured endpoint; no profile uses the
        configured one.

        Raises:
            ConfigurationError: STDIO profile, or a malformed base URL
        """
        if profile is None:
            return Endpoint(_check_base_url(self._settings.base_url), self._settings.timeout)
        if profile.transport_kind is not TransportKind.SSE or profile.sse_params is None:
            raise ConfigurationError(
                f"Profile {profile.name!r} uses {profile.transport_kind} transport; "
                "RAG calls need an SSE profile with a url"
            )
        sse = profile.sse_params
        return Endpoint(_check_base_url(sse.url), float(sse.timeout_seconds), dict(sse.headers))

    # ─────────────────────────────────────────────────────────────────
    # HTTP Client
    # ─────────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RagInvoker:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def _get(
        self,
        endpoint: Endpoint,
        path: str,
        reason: FallbackReason,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> InvocationResult:
        """GET one path, converting every backend failure into ``Err(Fallback)``."""
        url = endpoint.url(path)
        call_log = log.bind(url=url)
        start = time.perf_counter()
        try:
            async with asyncio.timeout(endpoint.timeout):
                response = await self._get_client().get(
                    url,
                    params=params,
                    headers={**(headers or {}), **endpoint.headers},
                    timeout=httpx.Timeout(endpoint.timeout),
                )
                response.raise_for_status()
        except (httpx.HTTPError, TimeoutError) as e:
            cause = describe_exception(e)
            call_log.error("rag call failed", reason=reason.value, cause=cause,
                           elapsed_ms=round((time.perf_counter() - start) * 1000, 1))
            return Err(Fallback(reason, cause))

        body = response.text
        call_log.debug("rag call succeeded", status=response.status_code, size=len(body),
                       elapsed_ms=round((time.perf_counter() - start) * 1000, 1))
        return Ok(body)

    # ─────────────────────────────────────────────────────────────────
    # Tools
    # ─────────────────────────────────────────────────────────────────

    async def _query_at(self, endpoint: Endpoint, text: str) -> InvocationResult:
        return await self._get(
            endpoint, "query", FallbackReason.QUERY_FAILED,
            params={"q": text}, headers={"Content-Type": "application/json"},
        )

    async def query_result(self, text: str, profile: ServerProfile | None = None) -> InvocationResult:
        """Ask the engine one question."""
        endpoint = self.resolve(profile)
        log.info("tool call", tool="query", query=text)
        return await self._query_at(endpoint, text)

    async def query(self, text: str, profile: ServerProfile | None = None) -> str:
        """Answer text, or ``QUERY_FAILED_SENTINEL`` when the engine cannot answer."""
        return to_text(await self.query_result(text, profile))

    async def batch_query_result(
        self, texts: Sequence[str], profile: ServerProfile | None = None,
    ) -> list[InvocationResult]:
        """One result per input, in input order. A failed item never stops later ones."""
        endpoint = self.resolve(profile)
        log.info("tool call", tool="batch_query", count=len(texts))
        return [await self._query_at(endpoint, text) for text in texts]

    async def batch_query(self, texts: Sequence[str], profile: ServerProfile | None = None) -> str:
        """Report with a ``query k: ...\\nresult: ...`` block per input."""
        results = await self.batch_query_result(texts, profile)
        return "".join(
            BATCH_ITEM_TEMPLATE.format(index=i, query=text, result=to_text(result))
            for i, (text, result) in enumerate(zip(texts, results, strict=True), start=1)
        )

    async def health_check_result(self, profile: ServerProfile | None = None) -> InvocationResult:
        endpoint = self.resolve(profile)
        log.info("tool call", tool="health_check")
        return await self._get(endpoint, "health", FallbackReason.SERVICE_UNAVAILABLE)

    async def health_check(self, profile: ServerProfile | None = None) -> str:
        """Status report wrapping the health body or ``SERVICE_UNAVAILABLE_SENTINEL``."""
        return HEALTH_REPORT_TEMPLATE.format(status=to_text(await self.health_check_result(profile)))
