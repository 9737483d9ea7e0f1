"""End-to-end tests for the gateway over HTTP (Starlette TestClient)."""

from __future__ import annotations

import httpx
import pytest
import respx
from starlette.testclient import TestClient

from raggate.ext.http import create_app
from raggate.foundation.config import GatewaySettings
from raggate.gateway import Gateway
from raggate.registry import ServerProfile
from raggate.tools import QUERY_FAILED_SENTINEL

RAG_BASE = "http://rag.test"

SVC1 = {
    "serverName": "svc1",
    "transportType": "SSE",
    "sseConfig": {"url": "http://x", "timeoutSeconds": 5},
}


async def _echo(prompt: str, profile: ServerProfile | None) -> str:
    where = profile.name if profile is not None else "default"
    return f"echo {prompt} via {where}"


@pytest.fixture
def gateway(settings: GatewaySettings) -> Gateway:
    return Gateway(settings, answer=_echo)


@pytest.fixture
def client(gateway: Gateway) -> TestClient:
    with TestClient(create_app(gateway)) as c:
        yield c


# ═════════════════════════════════════════════════════════════════════════════
# Server profiles
# ═════════════════════════════════════════════════════════════════════════════


def test_profile_lifecycle(client: TestClient) -> None:
    """configure → list → get → delete → get 404"""
    r = client.post("/api/mcp/servers", json=SVC1)
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "serverName": "svc1",
        "message": "MCP server configured",
        "status": "CONNECTED",
    }

    assert client.get("/api/mcp/servers").json() == {"svc1": "CONFIGURED"}

    profile = client.get("/api/mcp/servers/svc1").json()
    assert profile["serverName"] == "svc1"
    assert profile["transportType"] == "SSE"
    assert profile["sseConfig"] == {"url": "http://x", "timeoutSeconds": 5, "headers": {}}

    status = client.get("/api/mcp/servers/svc1/status").json()
    assert status == {"serverName": "svc1", "configured": True, "status": "CONFIGURED"}

    r = client.delete("/api/mcp/servers/svc1")
    assert r.status_code == 200
    assert r.json()["removed"] is True

    assert client.get("/api/mcp/servers/svc1").status_code == 404
    assert client.get("/api/mcp/servers").json() == {}


def test_configure_invalid_profile_is_400(client: TestClient) -> None:
    r = client.post("/api/mcp/servers", json={"serverName": "local", "transportType": "STDIO"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["status"] == "FAILED"
    assert body["serverName"] == "local"
    assert body["errorDetail"] == "STDIO transport requires a command"
    assert client.get("/api/mcp/servers").json() == {}


@pytest.mark.parametrize("content", [b"not json", b"[1, 2]", b""])
def test_configure_non_object_body_is_400(client: TestClient, content: bytes) -> None:
    r = client.post("/api/mcp/servers", content=content, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["errorDetail"] == "request body must be a JSON object"


def test_delete_missing_is_404(client: TestClient) -> None:
    r = client.delete("/api/mcp/servers/nope")
    assert r.status_code == 404
    assert r.json() == {"serverName": "nope", "removed": False}


def test_status_of_unknown_server(client: TestClient) -> None:
    body = client.get("/api/mcp/servers/ghost/status").json()
    assert body == {"serverName": "ghost", "configured": False, "status": "NOT_CONFIGURED"}


def test_health_counts_profiles(client: TestClient) -> None:
    client.post("/api/mcp/servers", json=SVC1)
    body = client.get("/api/mcp/health").json()
    assert body["status"] == "UP"
    assert body["service"] == "MCP Client Service"
    assert body["configuredServers"] == 1
    assert isinstance(body["timestamp"], int)


# ═════════════════════════════════════════════════════════════════════════════
# Query
# ═════════════════════════════════════════════════════════════════════════════


def test_query_uses_answerer(client: TestClient) -> None:
    r = client.get("/api/mcp/test/query", params={"query": "hello"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["query"] == "hello"
    assert body["response"] == "echo hello via default"
    assert body["method"] == "MCP tool call"


def test_query_with_named_server(client: TestClient) -> None:
    client.post("/api/mcp/servers", json=SVC1)
    body = client.get("/api/mcp/test/query", params={"query": "hi", "server": "svc1"}).json()
    assert body["response"] == "echo hi via svc1"


def test_query_unknown_server_is_500(client: TestClient) -> None:
    r = client.get("/api/mcp/test/query", params={"query": "hi", "server": "ghost"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert "ghost" in body["error"]


def test_query_missing_parameter_is_400(client: TestClient) -> None:
    assert client.get("/api/mcp/test/query").status_code == 400


def test_default_answerer_falls_back_to_sentinel(settings: GatewaySettings) -> None:
    """Backend failure still answers 200 with the sentinel as the response text."""
    with respx.mock(base_url=RAG_BASE) as router:
        router.get("/query").mock(return_value=httpx.Response(500))
        with TestClient(create_app(Gateway(settings))) as c:
            body = c.get("/api/mcp/test/query", params={"query": "x"}).json()
    assert body["success"] is True
    assert body["response"] == QUERY_FAILED_SENTINEL


# ═════════════════════════════════════════════════════════════════════════════
# Streaming chat
# ═════════════════════════════════════════════════════════════════════════════


def test_chat_stream_body(client: TestClient) -> None:
    r = client.get("/api/mcp/chat/stream", params={"prompt": "hi"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    assert r.headers["cache-control"] == "no-cache"
    assert r.text == (
        "data: 开始处理您的请求...\n\n"
        "data: echo\n\n"
        "data:  hi\n\n"
        "data:  via\n\n"
        "data:  default\n\n"
        "data: [DONE]\n\n"
    )


def test_chat_stream_unknown_server_reports_error_in_band(client: TestClient) -> None:
    r = client.get("/api/mcp/chat/stream", params={"prompt": "hi", "server": "ghost"})
    assert r.status_code == 200
    events = [e for e in r.text.split("\n\n") if e]
    assert events[0] == "data: 开始处理您的请求..."
    assert events[1].startswith("data: 错误: ") and "ghost" in events[1]
    assert events[-1] == "data: [ERROR]"
    assert "data: [DONE]" not in events


def test_chat_stream_missing_prompt_is_400(client: TestClient) -> None:
    assert client.get("/api/mcp/chat/stream").status_code == 400


def test_chat_stream_error_with_line_breaks_keeps_terminal_framing(client: TestClient) -> None:
    r = client.get("/api/mcp/chat/stream", params={"prompt": "hi", "server": "x\n\ndata: [DONE]\n\n"})
    events = [e for e in r.text.split("\n\n") if e]
    assert len(events) == 3
    assert events[-1] == "data: [ERROR]"
    assert "data: [DONE]" not in events
