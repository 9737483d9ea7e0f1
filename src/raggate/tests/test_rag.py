"""Tests for the RAG tool invoker against a mocked engine (respx)."""

from __future__ import annotations

import asyncio
import time

import httpx
import pytest
import respx

from raggate.foundation.config import RagSettings
from raggate.foundation.errors import ConfigurationError, ErrorCode, classify_exception
from raggate.registry import ServerProfile, SseParams, TransportKind
from raggate.tools import (
    QUERY_FAILED_SENTINEL,
    SERVICE_UNAVAILABLE_SENTINEL,
    FallbackReason,
    RagInvoker,
)

RAG_BASE = "http://rag.test"


# ═════════════════════════════════════════════════════════════════════════════
# Single query
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_query_returns_body_and_encodes_text(rag_settings: RagSettings) -> None:
    """Query text travels as the q parameter; the body comes back verbatim."""
    with respx.mock(base_url=RAG_BASE) as router:
        route = router.get("/query").mock(return_value=httpx.Response(200, text='{"answer": "42"}'))
        async with RagInvoker(rag_settings) as rag:
            assert await rag.query("what is MCP?") == '{"answer": "42"}'

    request = route.calls.last.request
    assert request.url.params["q"] == "what is MCP?"
    assert request.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_query_non_2xx_returns_sentinel(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/query").mock(return_value=httpx.Response(500, text="boom"))
        async with RagInvoker(rag_settings) as rag:
            result = await rag.query_result("x")
            text = await rag.query("x")

    assert text == QUERY_FAILED_SENTINEL
    fallback = result.unwrap_err()
    assert fallback.reason is FallbackReason.QUERY_FAILED
    assert fallback.cause.startswith("HTTP_STATUS")
    assert str(fallback) == QUERY_FAILED_SENTINEL


@pytest.mark.asyncio
async def test_query_connection_refused_returns_sentinel(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/query").mock(side_effect=httpx.ConnectError)
        async with RagInvoker(rag_settings) as rag:
            result = await rag.query_result("x")

    assert result.unwrap_err().cause.startswith("NETWORK_ERROR")
    assert result.unwrap_or_else(lambda f: f.sentinel) == QUERY_FAILED_SENTINEL


@pytest.mark.asyncio
async def test_query_read_timeout_returns_sentinel(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/query").mock(side_effect=httpx.ReadTimeout)
        async with RagInvoker(rag_settings) as rag:
            result = await rag.query_result("x")

    assert result.unwrap_err().cause.startswith("TIMEOUT")


@pytest.mark.asyncio
async def test_unresponsive_engine_is_bounded_by_timeout() -> None:
    """An engine that never answers yields the sentinel shortly after the timeout."""

    async def hang(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(10)
        return httpx.Response(200, text="too late")

    client = httpx.AsyncClient(transport=httpx.MockTransport(hang))
    rag = RagInvoker(RagSettings(base_url=RAG_BASE, timeout=0.2), client=client)
    start = time.perf_counter()
    try:
        assert await rag.query("x") == QUERY_FAILED_SENTINEL
    finally:
        await client.aclose()
    assert time.perf_counter() - start < 2.0


@pytest.mark.asyncio
async def test_injected_client_is_left_open(rag_settings: RagSettings) -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, text="ok")))
    async with RagInvoker(rag_settings, client=client) as rag:
        assert await rag.query("x") == "ok"
    assert not client.is_closed
    await client.aclose()


# ═════════════════════════════════════════════════════════════════════════════
# Batch
# ═════════════════════════════════════════════════════════════════════════════


def _answer_unless_a(request: httpx.Request) -> httpx.Response:
    q = request.url.params["q"]
    if q == "a":
        return httpx.Response(503)
    return httpx.Response(200, text=f"answer {q}")


@pytest.mark.asyncio
async def test_batch_failure_is_isolated_and_order_kept(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        route = router.get("/query").mock(side_effect=_answer_unless_a)
        async with RagInvoker(rag_settings) as rag:
            results = await rag.batch_query_result(["a", "b"])

    assert route.call_count == 2
    assert [r.is_ok() for r in results] == [False, True]
    assert results[1].unwrap() == "answer b"


@pytest.mark.asyncio
async def test_batch_report_format(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/query").mock(side_effect=_answer_unless_a)
        async with RagInvoker(rag_settings) as rag:
            report = await rag.batch_query(["a", "b"])

    assert report == (
        f"query 1: a\nresult: {QUERY_FAILED_SENTINEL}\n\n"
        "query 2: b\nresult: answer b\n\n"
    )


@pytest.mark.asyncio
async def test_empty_batch_makes_no_calls(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE, assert_all_called=False) as router:
        route = router.get("/query")
        async with RagInvoker(rag_settings) as rag:
            assert await rag.batch_query([]) == ""
    assert route.call_count == 0


# ═════════════════════════════════════════════════════════════════════════════
# Health
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_health_check_reports_body(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/health").mock(return_value=httpx.Response(200, text="UP"))
        async with RagInvoker(rag_settings) as rag:
            assert await rag.health_check() == "AgenticRag服务状态: UP"


@pytest.mark.asyncio
async def test_health_check_unavailable(rag_settings: RagSettings) -> None:
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/health").mock(return_value=httpx.Response(503))
        async with RagInvoker(rag_settings) as rag:
            result = await rag.health_check_result()
            report = await rag.health_check()

    assert result.unwrap_err().reason is FallbackReason.SERVICE_UNAVAILABLE
    assert report == f"AgenticRag服务状态: {SERVICE_UNAVAILABLE_SENTINEL}"


# ═════════════════════════════════════════════════════════════════════════════
# Target resolution
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_sse_profile_overrides_endpoint(rag_settings: RagSettings) -> None:
    profile = ServerProfile(
        name="svc1",
        transport_kind=TransportKind.SSE,
        sse_params=SseParams(url="http://other.test/rag/", timeout_seconds=5, headers={"X-Key": "k"}),
    )
    with respx.mock(assert_all_called=False) as router:
        default = router.get(f"{RAG_BASE}/query")
        other = router.get("http://other.test/rag/query").mock(return_value=httpx.Response(200, text="routed"))
        async with RagInvoker(rag_settings) as rag:
            assert await rag.query("x", profile) == "routed"

    assert default.call_count == 0
    assert other.calls.last.request.headers["X-Key"] == "k"


def test_resolve_uses_profile_timeout(rag_settings: RagSettings, sse_profile: ServerProfile) -> None:
    endpoint = RagInvoker(rag_settings).resolve(sse_profile)
    assert endpoint.base_url == "http://x"
    assert endpoint.timeout == 5.0
    assert endpoint.url("/query") == "http://x/query"


@pytest.mark.asyncio
async def test_stdio_profile_is_a_configuration_error(
    rag_settings: RagSettings, stdio_profile: ServerProfile,
) -> None:
    async with RagInvoker(rag_settings) as rag:
        with pytest.raises(ConfigurationError, match="SSE profile"):
            await rag.query("x", stdio_profile)


@pytest.mark.asyncio
@pytest.mark.parametrize("base_url", ["not a url", "ftp://rag.test", "http://"])
async def test_malformed_base_url_raises(base_url: str) -> None:
    async with RagInvoker(RagSettings(base_url=base_url)) as rag:
        with pytest.raises(ConfigurationError) as info:
            await rag.query("x")
    assert info.value.code is ErrorCode.CONFIGURATION
    assert classify_exception(info.value) is ErrorCode.CONFIGURATION
