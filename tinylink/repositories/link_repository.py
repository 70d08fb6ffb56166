"""Link Repository for the TinyLink application.

This module provides the LinkRepository class for database operations related to Link models.
Following the Repository pattern, it abstracts the storage contract used by the link
service: create with a unique code, find by code, list newest first, atomic click
increment and delete by code.
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy import desc
from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.models.link import Link, LinkCreate, utcnow
from tinylink.repositories.base import BaseRepository


class LinkRepository(BaseRepository[Link, LinkCreate]):
    """
    Repository for Link model database operations.

    The unique index on ``links.code`` is the authority on code uniqueness;
    ``check_code_exists`` is only a fast path for friendlier errors.
    """

    unique_field = "code"

    def __init__(self):
        """Initialize the repository with the Link model type."""
        super().__init__(Link)

    async def create_link(
        self,
        db: AsyncSession,
        data: Union[LinkCreate, Dict[str, Any]]
    ) -> Link:
        """
        Insert a new link with zero clicks.

        Args:
            db: Database session
            data: Link data (either as a LinkCreate model or dictionary)

        Returns:
            The created Link entity

        Raises:
            DuplicateEntityError: If the code is already taken
            RepositoryError: On other database errors
        """
        return await self.create(db, data)

    async def get_by_code(self, db: AsyncSession, code: str) -> Optional[Link]:
        """
        Find a link by its code.

        Args:
            db: Database session
            code: The unique code to look up

        Returns:
            The Link if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        return await self.get_one_by(db, code=code)

    async def get_all_links(self, db: AsyncSession) -> List[Link]:
        """
        Get every link, newest first.

        Args:
            db: Database session

        Returns:
            List of Link entities ordered by creation date (descending)

        Raises:
            RepositoryError: On database errors
        """
        return await self.get_all(
            db,
            order_by=[desc(self.model_type.created_at), desc(self.model_type.id)]
        )

    async def check_code_exists(self, db: AsyncSession, code: str) -> bool:
        """
        Check if a code is already in use.

        Raises:
            RepositoryError: On database errors
        """
        return await self.exists(db, code=code)

    async def increment_clicks(self, db: AsyncSession, code: str) -> Optional[Link]:
        """
        Increment the click counter and stamp the click time for a link.

        The counter is bumped with a single ``UPDATE ... SET clicks = clicks + 1``
        so concurrent redirects never lose an update.

        Args:
            db: Database session
            code: The code of the link that was visited

        Returns:
            The updated Link if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        updated = await self.bulk_update(
            db,
            {"code": code},
            {
                "clicks": self.model_type.clicks + 1,
                "last_clicked_at": utcnow(),
            }
        )
        if not updated:
            return None
        return await self.get_by_code(db, code)

    async def delete_by_code(self, db: AsyncSession, code: str) -> bool:
        """
        Delete a link by its code.

        Returns:
            True if a link was deleted, False if none matched

        Raises:
            RepositoryError: On database errors
        """
        deleted = await self.bulk_delete(db, code=code)
        return deleted > 0
