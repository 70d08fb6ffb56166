"""Link service for the TinyLink application.

This module contains the LinkService class which implements the link registry:
code allocation, validation, uniqueness enforcement and click accounting.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.models.link import Link
from tinylink.repositories.link_repository import LinkRepository
from tinylink.repositories.base import RepositoryError, DuplicateEntityError
from tinylink.services.codes import (
    code_requirements,
    generate_code,
    is_valid_code,
    is_valid_url,
)
from tinylink.services.exceptions import (
    CodeAlreadyExistsError,
    CodeGenerationError,
    InvalidCodeError,
    InvalidURLError,
    LinkNotFoundError,
    StorageError,
)
from tinylink.core.config import settings
from tinylink.db.session import db_transaction

logger = logging.getLogger(__name__)


class LinkService:
    """
    Service for link registry business logic.

    Every operation receives the session it should run in. Validation always
    happens before the first storage call.
    """

    def __init__(self, link_repository: LinkRepository):
        """
        Initialize the link service.

        Args:
            link_repository: Repository for link data access
        """
        self.link_repository = link_repository

    @db_transaction(db_param_name="db")
    async def create_link(
        self,
        db: AsyncSession,
        original_url: str,
        code: Optional[str] = None,
    ) -> Link:
        """
        Register a new link, generating a code when none is supplied.

        Args:
            db: Database session
            original_url: The URL to redirect to
            code: Optional caller-chosen code

        Returns:
            Link: The persisted link

        Raises:
            InvalidURLError: If the URL is missing or malformed
            InvalidCodeError: If the code does not have the required shape
            CodeAlreadyExistsError: If the code is already in use
            CodeGenerationError: If no unused code could be generated
            StorageError: If the backing store fails
        """
        if original_url is None or not str(original_url).strip():
            raise InvalidURLError("URL is required")
        original_url = str(original_url)

        custom = code is not None and bool(code.strip())
        if custom:
            code = code.strip()
            if not is_valid_code(code):
                raise InvalidCodeError(code_requirements())
            if not is_valid_url(original_url):
                raise InvalidURLError("Invalid URL format")
            if await self._code_exists(db, code):
                raise CodeAlreadyExistsError("Code already exists")
        else:
            if not is_valid_url(original_url):
                raise InvalidURLError("Invalid URL format")
            code = await self._generate_unused_code(db)

        try:
            link = await self.link_repository.create_link(
                db, {"code": code, "original_url": original_url}
            )
        except DuplicateEntityError:
            # Another request took the code between the check and the insert
            logger.info(f"Code '{code}' was taken concurrently")
            raise CodeAlreadyExistsError("Code already exists")
        except RepositoryError as e:
            logger.error(f"Error creating link: {e}")
            raise StorageError("Failed to create link") from e

        logger.info(f"Created link '{link.code}' -> {link.original_url}")
        return link

    async def get_link(self, db: AsyncSession, code: str) -> Link:
        """
        Retrieve a link by its code.

        Raises:
            InvalidCodeError: If the code is empty or malformed
            LinkNotFoundError: If no link with this code exists
            StorageError: If the backing store fails
        """
        code = self._check_code(code)
        try:
            link = await self.link_repository.get_by_code(db, code)
        except RepositoryError as e:
            logger.error(f"Error retrieving link by code: {e}")
            raise StorageError("Failed to fetch link") from e

        if link is None:
            raise LinkNotFoundError("Link not found")
        return link

    async def list_links(self, db: AsyncSession) -> List[Link]:
        """
        Get all links, newest first.

        Raises:
            StorageError: If the backing store fails
        """
        try:
            return await self.link_repository.get_all_links(db)
        except RepositoryError as e:
            logger.error(f"Error retrieving links list: {e}")
            raise StorageError("Failed to fetch links") from e

    @db_transaction(db_param_name="db")
    async def record_click(self, db: AsyncSession, code: str) -> Link:
        """
        Count one visit of a link.

        Args:
            db: Database session
            code: Code of the visited link

        Returns:
            Link: The link with its updated counter

        Raises:
            LinkNotFoundError: If no link with this code exists
            StorageError: If the backing store fails
        """
        try:
            link = await self.link_repository.increment_clicks(db, code)
        except RepositoryError as e:
            logger.error(f"Error incrementing clicks for '{code}': {e}")
            raise StorageError("Failed to record click") from e

        if link is None:
            raise LinkNotFoundError("Link not found")
        return link

    @db_transaction(db_param_name="db")
    async def delete_link(self, db: AsyncSession, code: str) -> bool:
        """
        Delete a link by its code.

        Raises:
            InvalidCodeError: If the code is empty or malformed
            LinkNotFoundError: If no link with this code exists
            StorageError: If the backing store fails
        """
        code = self._check_code(code)
        try:
            deleted = await self.link_repository.delete_by_code(db, code)
        except RepositoryError as e:
            logger.error(f"Error deleting link: {e}")
            raise StorageError("Failed to delete link") from e

        if not deleted:
            raise LinkNotFoundError("Link not found")

        logger.info(f"Deleted link '{code}'")
        return True

    def _check_code(self, code: Optional[str]) -> str:
        # Lookups match the stored code exactly, only creation trims
        if code is None or not code.strip():
            raise InvalidCodeError("Code is required")
        if not is_valid_code(code):
            raise InvalidCodeError(code_requirements())
        return code

    async def _code_exists(self, db: AsyncSession, code: str) -> bool:
        try:
            return await self.link_repository.check_code_exists(db, code)
        except RepositoryError as e:
            logger.error(f"Error checking if code exists: {e}")
            raise StorageError("Failed to validate code") from e

    async def _generate_unused_code(self, db: AsyncSession) -> str:
        """
        Generate a code that isn't already in use.

        Raises:
            CodeGenerationError: If no candidate was both well-formed and unused
        """
        for _ in range(settings.CODE_GENERATION_ATTEMPTS):
            candidate = generate_code()
            if not is_valid_code(candidate):
                logger.warning(f"Generated code '{candidate}' does not satisfy the code rule")
                continue
            if not await self._code_exists(db, candidate):
                return candidate

        raise CodeGenerationError(
            "Failed to generate a unique code. Try again later or choose a custom code."
        )
