"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from tinylink.api.routes import links, redirect, health
from tinylink.core.config import settings

# Create root router
api_router = APIRouter()

# Include link routes with API prefix
api_router.include_router(
    links.router,
    prefix=settings.API_PREFIX
)

# Liveness is served both at the root and under the API prefix
api_router.include_router(health.router)
api_router.include_router(
    health.router,
    prefix=settings.API_PREFIX
)

# Include redirect routes at the root path (no prefix)
# This makes short links available directly at /{code}
api_router.include_router(
    redirect.router
)

__all__ = ["api_router"]
