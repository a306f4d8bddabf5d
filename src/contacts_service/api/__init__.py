"""aiohttp HTTP surface for the contacts service."""

from .server import create_app, start_http_server

__all__ = ["create_app", "start_http_server"]
