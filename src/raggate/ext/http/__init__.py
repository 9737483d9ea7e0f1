"""HTTP endpoints for the gateway."""

from .app import API_PREFIX, GatewayServer, create_app, serve_http

__all__ = ["API_PREFIX", "GatewayServer", "create_app", "serve_http"]
