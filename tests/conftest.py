"""Test fixtures for the TinyLink application."""

import os

# Settings are read at import time, so the environment is prepared first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BASE_URL"] = "http://testserver"
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_CREATE_TABLES"] = "true"

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.db.base import Database
from tinylink.main import create_app
from tinylink.repositories.link_repository import LinkRepository
from tinylink.services.links import LinkService


# Test database URL - using SQLite in-memory
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Create a fresh in-memory database with all tables."""
    db = Database(TEST_DATABASE_URL)
    await db.create_tables()
    yield db
    await db.drop_tables()
    await db.dispose()


@pytest_asyncio.fixture
async def file_database(tmp_path) -> AsyncGenerator[Database, None]:
    """Create a file-backed SQLite database shared by several connections."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'links.db'}")
    await db.create_tables()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def test_db(database) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for one test."""
    async with database.session() as session:
        yield session


@pytest.fixture
def link_repository() -> LinkRepository:
    """Return link repository instance."""
    return LinkRepository()


@pytest.fixture
def link_service(link_repository) -> LinkService:
    """Return link service instance."""
    return LinkService(link_repository=link_repository)


@pytest.fixture
def test_app() -> FastAPI:
    """Create FastAPI test app backed by an in-memory database."""
    return create_app(database_url=TEST_DATABASE_URL)


@pytest.fixture
def client(test_app) -> Generator[TestClient, None, None]:
    """Return FastAPI TestClient instance with the lifespan running."""
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()
