"""Request-scoped sessions and transaction boundaries.

Routes receive a session from ``get_db``; service methods that change data
are wrapped with ``db_transaction`` so each one commits or rolls back as a
unit.
"""

from typing import AsyncGenerator, Callable, Optional, TypeVar
import logging
import inspect
from functools import wraps

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from tinylink.db.base import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_database(request: Request) -> Database:
    """Return the storage client owned by the running application."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Anything left uncommitted when the handler raises is rolled back before
    the session is closed.
    """
    async with get_database(request).session() as session:
        try:
            yield session
        except SQLAlchemyError:
            logger.exception("Database error while handling request")
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


def _session_parameter(func: Callable, db_param_name: Optional[str]) -> Optional[str]:
    """Find the parameter carrying the session, by name or by annotation."""
    for name, param in inspect.signature(func).parameters.items():
        if db_param_name is not None:
            if name == db_param_name:
                return name
        elif param.annotation in (AsyncSession, "AsyncSession"):
            return name
    return None


def db_transaction(db_param_name: Optional[str] = None) -> Callable:
    """Run a coroutine as one transaction on the session it receives.

    The session argument is located by ``db_param_name`` or, when omitted,
    by an ``AsyncSession`` annotation. The transaction commits when the
    coroutine returns and rolls back when it raises.

    Example:
        ```python
        @db_transaction(db_param_name="db")
        async def record_click(self, db: AsyncSession, code: str) -> Link:
            ...
        ```
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        signature = inspect.signature(func)
        param_name = _session_parameter(func, db_param_name)
        if param_name is None:
            logger.warning(f"No session parameter found on '{func.__qualname__}'")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            db = None
            if param_name is not None:
                bound = signature.bind_partial(*args, **kwargs)
                db = bound.arguments.get(param_name)
            if not isinstance(db, AsyncSession):
                db = next(
                    (value for value in (*args, *kwargs.values()) if isinstance(value, AsyncSession)),
                    db,
                )
            if db is None:
                raise ValueError(f"'{func.__qualname__}' was called without a database session")

            try:
                result = await func(*args, **kwargs)
                await db.commit()
            except Exception as e:
                await db.rollback()
                logger.debug(f"Rolled back '{func.__qualname__}': {e!r}")
                raise
            return result

        return wrapper
    return decorator
