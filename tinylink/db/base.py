"""Database base configuration for SQLAlchemy with SQLModel.

This module provides the storage client for the application:
- Engine configuration per storage backend (PostgreSQL or SQLite)
- Session factory
- Schema creation
- Health check functionality

One Database instance is owned by the application for its whole lifetime.
It is created on startup and disposed on shutdown.
"""

from typing import AsyncGenerator, Dict, Optional, Any
import asyncio
import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import text
from sqlmodel import SQLModel

from tinylink.core.config import settings, normalize_database_url, database_backend

# Register table models with SQLModel metadata
from tinylink.models.link import Link  # noqa: F401

logger = logging.getLogger(__name__)


def get_engine_config(url: str) -> Dict[str, Any]:
    """Get the engine configuration for the backend selected by a URL.

    Args:
        url: Async SQLAlchemy connection string

    Returns:
        Dict: Engine configuration parameters for the backend.
    """
    backend = database_backend(url)
    config: Dict[str, Any] = {"echo": settings.DB_ECHO}

    if backend == "sqlite":
        # The sqlite busy timeout bounds how long a writer waits for a lock
        config["connect_args"] = {"timeout": settings.DB_TIMEOUT}
        if ":memory:" in url or "mode=memory" in url:
            # A single shared connection keeps the in-memory database alive
            config["poolclass"] = StaticPool
        return config

    config.update({
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_POOL_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    })
    if backend == "postgresql":
        config["connect_args"] = {"command_timeout": settings.DB_TIMEOUT}
    return config


class Database:
    """Storage client wrapping an async engine and its session factory."""

    def __init__(self, url: Optional[str] = None):
        """
        Create the engine for a connection string.

        Args:
            url: Connection string, defaults to settings.DATABASE_URL
        """
        self.url = normalize_database_url(url or settings.DATABASE_URL)
        self.backend = database_backend(self.url)
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            **get_engine_config(self.url),
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(f"Created {self.backend} database engine")

    async def create_tables(self) -> None:
        """Create missing tables and indexes."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables initialized")

    async def drop_tables(self) -> None:
        """Drop all tables known to the metadata."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async session with proper cleanup.

        Yields:
            AsyncSession: SQLAlchemy async session
        """
        session = self.session_factory()
        try:
            yield session
        finally:
            await session.close()

    async def dispose(self) -> None:
        """Release every pooled connection."""
        await self.engine.dispose()
        logger.info(f"Disposed {self.backend} database engine")

    async def check_connection(self) -> Dict:
        """Check database connectivity and return status.

        Returns:
            Dict: Health check result containing status and latency information
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        status = "healthy"
        error_message = None
        latency_ms = 0

        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            latency_ms = int((loop.time() - start_time) * 1000)
        except Exception as e:
            status = "unhealthy"
            error_message = str(e)
            logger.error(f"Database health check failed: {e}")

        return {
            "status": status,
            "backend": self.backend,
            "latency_ms": latency_ms,
            "error": error_message,
        }
