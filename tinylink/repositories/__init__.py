"""Repository layer for the TinyLink application.

This module provides repository classes that abstract database operations
and implement the Repository pattern for clean separation of concerns.
"""

from tinylink.repositories.base import (
    BaseRepository,
    RepositoryError,
    DuplicateEntityError
)
from tinylink.repositories.link_repository import LinkRepository

__all__ = [
    # Base classes and exceptions
    "BaseRepository",
    "RepositoryError",
    "DuplicateEntityError",

    # Concrete repositories
    "LinkRepository",
]
