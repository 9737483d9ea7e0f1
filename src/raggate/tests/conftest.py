"""Shared fixtures: quiet logging, fast pacing, RAG settings pointing at a mock host."""

from __future__ import annotations

import pytest

from raggate.foundation.config import GatewaySettings, RagSettings, StreamSettings, clear_settings_cache
from raggate.registry import ServerProfile, SseParams, StdioParams, TransportKind
from raggate.runtime.observability import configure_logging

RAG_BASE = "http://rag.test"


@pytest.fixture(autouse=True)
def quiet_logging() -> object:
    configure_logging(format="none", level="DEBUG")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def rag_settings() -> RagSettings:
    return RagSettings(base_url=RAG_BASE, timeout=2.0)


@pytest.fixture
def settings(rag_settings: RagSettings) -> GatewaySettings:
    return GatewaySettings(rag=rag_settings, stream=StreamSettings(token_delay=0, frame_delay=0))


@pytest.fixture
def sse_profile() -> ServerProfile:
    return ServerProfile(
        name="svc1",
        transport_kind=TransportKind.SSE,
        sse_params=SseParams(url="http://x", timeout_seconds=5),
    )


@pytest.fixture
def stdio_profile() -> ServerProfile:
    return ServerProfile(
        name="local",
        transport_kind=TransportKind.STDIO,
        stdio_params=StdioParams(command="npx", args=["-y", "rag-server"], env={"TOKEN": "t"}),
    )
