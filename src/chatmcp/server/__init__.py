"""HTTP transport."""

from chatmcp.server.app import cors_headers, create_app

__all__ = ["cors_headers", "create_app"]
