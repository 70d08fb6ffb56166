"""Generic repository for TinyLink storage access.

Concrete repositories subclass ``BaseRepository`` with their SQLModel table.
Driver failures never leave this layer as SQLAlchemy exceptions: they are
re-raised as ``RepositoryError`` or, for unique-index violations,
``DuplicateEntityError``.
"""

from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union
import logging

from pydantic import BaseModel
from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A storage operation failed."""
    pass


class DuplicateEntityError(RepositoryError):
    """A row with the same unique value already exists."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{getattr(model_type, '__name__', 'Row')} {field_name}={value} is already taken"
        )


def is_unique_violation(error: IntegrityError) -> bool:
    """Tell unique-constraint violations apart from other integrity errors.

    SQLite reports ``UNIQUE constraint failed``, PostgreSQL reports
    ``duplicate key value violates unique constraint``.
    """
    message = str(error.orig if error.orig is not None else error).lower()
    return "unique constraint" in message or "duplicate key" in message


class BaseRepository(Generic[ModelType, CreateSchemaType]):
    """
    Common storage operations for one SQLModel table.

    Every method takes the session to run in and never commits; the caller
    owns the transaction.
    """

    # Column named in DuplicateEntityError when an insert hits a unique index
    unique_field: Optional[str] = None

    def __init__(self, model_type: Type[ModelType]):
        self.model_type = model_type

    @property
    def model_name(self) -> str:
        return self.model_type.__name__

    def _where(self, filters: Mapping[str, Any]) -> List[Any]:
        """Build equality conditions from column=value pairs."""
        if not filters:
            raise ValueError(f"At least one filter is required for {self.model_name}")
        return [getattr(self.model_type, column) == value for column, value in filters.items()]

    async def get_all(self, db: AsyncSession, order_by: Optional[List[Any]] = None) -> List[ModelType]:
        """
        Load every row of the table.

        Args:
            db: Database session
            order_by: Columns or expressions to sort by

        Raises:
            RepositoryError: On database errors
        """
        query = select(self.model_type)
        if order_by:
            query = query.order_by(*order_by)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Listing {self.model_name} rows failed: {e}")
            raise RepositoryError(f"Could not list {self.model_name} rows: {e}") from e
        return list(result.scalars().all())

    async def get_one_by(self, db: AsyncSession, **filters) -> Optional[ModelType]:
        """
        Load the single row matching column=value filters, or None.

        Raises:
            RepositoryError: On database errors
        """
        # populate_existing refreshes rows already held in the identity map
        query = (
            select(self.model_type)
            .where(*self._where(filters))
            .execution_options(populate_existing=True)
        )
        try:
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Loading {self.model_name} by {filters} failed: {e}")
            raise RepositoryError(f"Could not load {self.model_name}: {e}") from e

    async def create(self, db: AsyncSession, data: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        Insert a row and flush it so constraints are checked immediately.

        Args:
            db: Database session
            data: Column values as a pydantic model or a dict

        Returns:
            The inserted row with server-side defaults loaded

        Raises:
            DuplicateEntityError: If a unique index rejects the row
            RepositoryError: On other database errors
        """
        values = data.model_dump(exclude_unset=True) if isinstance(data, BaseModel) else dict(data)
        entity = self.model_type(**values)

        try:
            db.add(entity)
            await db.flush()
            await db.refresh(entity)
        except IntegrityError as e:
            await db.rollback()
            if self.unique_field and is_unique_violation(e):
                raise DuplicateEntityError(
                    self.model_type, self.unique_field, values.get(self.unique_field)
                ) from e
            logger.error(f"Inserting {self.model_name} violated a constraint: {e}")
            raise RepositoryError(f"Could not insert {self.model_name}: {e}") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Inserting {self.model_name} failed: {e}")
            raise RepositoryError(f"Could not insert {self.model_name}: {e}") from e
        return entity

    async def exists(self, db: AsyncSession, **filters) -> bool:
        """
        Tell whether any row matches column=value filters.

        Raises:
            RepositoryError: On database errors
        """
        query = select(exists().where(*self._where(filters)))
        try:
            result = await db.execute(query)
            return bool(result.scalar())
        except SQLAlchemyError as e:
            logger.error(f"Existence check on {self.model_name} failed: {e}")
            raise RepositoryError(f"Could not check {self.model_name}: {e}") from e

    async def bulk_update(self, db: AsyncSession, filters: Dict[str, Any], data: Dict[str, Any]) -> int:
        """
        Apply one UPDATE to every row matching filters.

        Values may be SQL expressions such as ``Model.counter + 1``; they are
        evaluated by the database, not in Python.

        Returns:
            Number of rows changed

        Raises:
            RepositoryError: On database errors
        """
        stmt = (
            update(self.model_type)
            .where(*self._where(filters))
            .values(**data)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Updating {self.model_name} rows failed: {e}")
            raise RepositoryError(f"Could not update {self.model_name}: {e}") from e
        return result.rowcount

    async def bulk_delete(self, db: AsyncSession, **filters) -> int:
        """
        Delete every row matching column=value filters.

        Returns:
            Number of rows removed

        Raises:
            RepositoryError: On database errors
        """
        stmt = (
            delete(self.model_type)
            .where(*self._where(filters))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Deleting {self.model_name} rows failed: {e}", exc_info=True)
            raise RepositoryError(f"Could not delete {self.model_name}: {e}") from e
        return result.rowcount
