"""API package for the TinyLink application.

This package contains the API layer components including routes,
request/response schemas, and dependency providers.
"""

from tinylink.api.routes import api_router

__all__ = ["api_router"]
