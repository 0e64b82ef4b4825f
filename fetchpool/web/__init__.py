"""
HTTP Adapter Layer.

This package exposes the job manager's submit and poll operations over HTTP
using aiohttp.web.
"""

from .server import MANAGER_KEY, create_app

__all__ = ["MANAGER_KEY", "create_app"]
