"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access service instances.
"""

from fastapi import Depends

from tinylink.repositories.link_repository import LinkRepository
from tinylink.services.links import LinkService
from tinylink.core.config import settings


async def get_link_repository():
    """Get an instance of the link repository."""
    return LinkRepository()


async def get_link_service(
    link_repo: LinkRepository = Depends(get_link_repository),
) -> LinkService:
    """Get an instance of the link service."""
    return LinkService(link_repository=link_repo)


def get_base_url():
    """Get the base URL for short links."""
    return settings.BASE_URL
