"""Local proxy server that injects a server-held provider key."""

from .server import create_app

__all__ = ["create_app"]
