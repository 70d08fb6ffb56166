"""Basic tests to verify test DB setup."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError

from tinylink.models.link import Link, UTCTimestamp


@pytest.mark.asyncio
async def test_create_tables(test_db):
    """Verify tables are created correctly in test database."""
    result = await test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table' AND name='links'"))
    tables = [row[0] for row in result.fetchall()]
    assert "links" in tables

    link = Link(original_url="https://example.com", code="test123")
    test_db.add(link)
    await test_db.commit()

    result = await test_db.execute(select(Link).where(Link.code == "test123"))
    retrieved = result.scalars().first()

    assert retrieved is not None
    assert retrieved.original_url == "https://example.com"
    assert retrieved.clicks == 0
    assert retrieved.last_clicked_at is None
    assert retrieved.created_at is not None


@pytest.mark.asyncio
async def test_code_column_is_unique(test_db):
    """The storage layer itself rejects a second row with the same code."""
    test_db.add(Link(original_url="https://example.com/a", code="same123"))
    await test_db.commit()

    test_db.add(Link(original_url="https://example.com/b", code="same123"))
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()


@pytest.mark.asyncio
async def test_indexes_exist(test_db):
    """Verify the lookup and listing indexes are created."""
    result = await test_db.execute(text("PRAGMA index_list('links')"))
    indexes = {row[1]: row[2] for row in result.fetchall()}

    assert "ix_links_created_at" in indexes
    assert "ix_links_code" in indexes
    # The code index enforces uniqueness
    assert indexes["ix_links_code"] == 1


@pytest.mark.asyncio
async def test_server_defaults_apply_to_raw_inserts(test_db):
    """Rows inserted without the ORM still get zero clicks and a creation time."""
    await test_db.execute(
        text("INSERT INTO links (code, original_url) VALUES ('rawrow1', 'https://example.com')")
    )
    await test_db.commit()

    result = await test_db.execute(
        text("SELECT clicks, created_at, last_clicked_at FROM links WHERE code = 'rawrow1'")
    )
    clicks, created_at, last_clicked_at = result.one()
    assert clicks == 0
    assert created_at is not None
    assert last_clicked_at is None


def test_timestamp_columns_use_utc_type():
    assert isinstance(Link.__table__.c.created_at.type, UTCTimestamp)
    assert isinstance(Link.__table__.c.last_clicked_at.type, UTCTimestamp)


@pytest.mark.asyncio
async def test_timestamps_read_back_as_utc(test_db):
    """Stored timestamps come back timezone-aware with a zero offset."""
    clicked = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
    test_db.add(Link(original_url="https://example.com", code="tzaware", last_clicked_at=clicked))
    await test_db.commit()
    test_db.expunge_all()

    result = await test_db.execute(select(Link).where(Link.code == "tzaware"))
    retrieved = result.scalars().one()

    assert retrieved.created_at.utcoffset() == timedelta(0)
    assert retrieved.last_clicked_at.utcoffset() == timedelta(0)
    assert retrieved.last_clicked_at == clicked
    assert retrieved.last_clicked_at.hour == 12


@pytest.mark.asyncio
async def test_naive_timestamps_are_taken_as_utc(test_db):
    test_db.add(Link(
        original_url="https://example.com",
        code="tznaive",
        created_at=datetime(2024, 1, 2, 3, 4, 5),
    ))
    await test_db.commit()
    test_db.expunge_all()

    result = await test_db.execute(select(Link).where(Link.code == "tznaive"))
    retrieved = result.scalars().one()

    assert retrieved.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
