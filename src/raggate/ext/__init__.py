"""Outer surfaces: HTTP endpoints and MCP tool server."""
