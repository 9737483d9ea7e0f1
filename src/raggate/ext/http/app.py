"""HTTP endpoints for the gateway (Starlette).

Routes, all under ``/api/mcp``:
- GET    /health                  → gateway liveness and profile count
- POST   /servers                 → configure a server profile (400 on invalid input)
- GET    /servers                 → name → "CONFIGURED"
- GET    /servers/{name}          → profile (404 when absent)
- DELETE /servers/{name}          → remove profile (404 when absent)
- GET    /servers/{name}/status   → configured flag and label
- GET    /test/query?query=...    → one tool-backed answer
- GET    /chat/stream?prompt=...  → SSE stream of paced chunks

Example:
    >>> from raggate.ext.http import create_app
    >>> app = create_app()            # ASGI app, e.g. for uvicorn or mounting
    >>> GatewayServer().run(port=8000)
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.responses import JSONResponse, StreamingResponse
from starlette.routing import Mount, Route

from raggate.gateway import Gateway
from raggate.io.streaming import SSE_MEDIA_TYPE
from raggate.runtime.observability import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.requests import Request

log = get_logger(__name__)

API_PREFIX = "/api/mcp"


def _missing_param(name: str) -> JSONResponse:
    return JSONResponse({"error": f"Missing required query parameter '{name}'"}, status_code=400)


class GatewayServer:
    """Starlette app exposing a ``Gateway`` over HTTP.

    The app's lifespan closes the gateway's HTTP client on shutdown.
    """

    __slots__ = ("_gateway", "_app")

    def __init__(self, gateway: Gateway | None = None) -> None:
        self._gateway = gateway or Gateway()
        self._app = self._create_app()

    @property
    def gateway(self) -> Gateway:
        return self._gateway

    @property
    def app(self) -> Starlette:
        """ASGI app for embedding in larger applications."""
        return self._app

    def _create_app(self) -> Starlette:
        gateway = self._gateway

        async def health(request: Request) -> JSONResponse:
            return JSONResponse(gateway.health())

        async def configure_server(request: Request) -> JSONResponse:
            try:
                payload = await request.json()
            except ValueError:
                payload = None
            if not isinstance(payload, dict):
                body, ok = gateway.configure_server({})
                body["errorDetail"] = "request body must be a JSON object"
            else:
                body, ok = gateway.configure_server(payload)
            return JSONResponse(body, status_code=200 if ok else 400)

        async def list_servers(request: Request) -> JSONResponse:
            return JSONResponse(gateway.list_servers())

        async def get_server(request: Request) -> JSONResponse:
            name = request.path_params["name"]
            if (profile := gateway.get_server(name)) is None:
                return JSONResponse({"error": f"Server '{name}' not found"}, status_code=404)
            return JSONResponse(profile)

        async def remove_server(request: Request) -> JSONResponse:
            name = request.path_params["name"]
            if (body := gateway.remove_server(name)) is None:
                return JSONResponse({"serverName": name, "removed": False}, status_code=404)
            return JSONResponse(body)

        async def server_status(request: Request) -> JSONResponse:
            return JSONResponse(gateway.server_status(request.path_params["name"]))

        async def invoke_query(request: Request) -> JSONResponse:
            if (query := request.query_params.get("query")) is None:
                return _missing_param("query")
            body, ok = await gateway.invoke_query(query, request.query_params.get("server"))
            return JSONResponse(body, status_code=200 if ok else 500)

        async def stream_chat(request: Request) -> StreamingResponse | JSONResponse:
            if (prompt := request.query_params.get("prompt")) is None:
                return _missing_param("prompt")
            chunks = gateway.stream_chat(prompt, request.query_params.get("server"))
            return StreamingResponse(chunks, media_type=SSE_MEDIA_TYPE,
                                     headers={"Cache-Control": "no-cache"})

        @contextlib.asynccontextmanager
        async def lifespan(app: Starlette) -> AsyncIterator[None]:
            log.info("gateway starting", rag_base_url=gateway.settings.rag.base_url)
            yield
            await gateway.aclose()
            log.info("gateway stopped")

        routes = [
            Route("/health", health, methods=["GET"]),
            Route("/servers", configure_server, methods=["POST"]),
            Route("/servers", list_servers, methods=["GET"]),
            Route("/servers/{name}", get_server, methods=["GET"]),
            Route("/servers/{name}", remove_server, methods=["DELETE"]),
            Route("/servers/{name}/status", server_status, methods=["GET"]),
            Route("/test/query", invoke_query, methods=["GET"]),
            Route("/chat/stream", stream_chat, methods=["GET"]),
        ]
        return Starlette(
            debug=gateway.settings.debug,
            routes=[Mount(API_PREFIX, routes=routes)],
            lifespan=lifespan,
        )

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the HTTP server (blocking)."""
        import uvicorn

        server = self._gateway.settings.server
        uvicorn.run(self._app, host=host or server.host, port=port or server.port, log_config=None)


def create_app(gateway: Gateway | None = None) -> Starlette:
    """Create the ASGI app without running it."""
    return GatewayServer(gateway).app


def serve_http(gateway: Gateway | None = None, *, host: str | None = None, port: int | None = None) -> None:
    """Serve the gateway endpoints with uvicorn."""
    GatewayServer(gateway).run(host=host, port=port)
