"""Link data models.

This module defines the Link model mapping a short code to its original URL
together with click accounting fields.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, text
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCTimestamp(TypeDecorator):
    """Timestamp column that always holds UTC and always returns aware values.

    PostgreSQL keeps the offset in ``timestamptz``; SQLite has no timezone
    storage, so values read back from it are tagged as UTC. Naive values
    written by callers are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class LinkBase(SQLModel):
    """Base model for link data."""

    code: str = Field(
        max_length=10,
        unique=True,  # Storage-level uniqueness, also creates the lookup index
        index=True,
        nullable=False,
        description="Short alphanumeric code identifying the link"
    )
    original_url: str = Field(
        nullable=False,
        description="The original (long) URL to redirect to"
    )


class Link(LinkBase, table=True):
    """
    Link model for storing shortened URLs in the database.

    A link is identified by its code. Only click accounting fields change
    after creation.
    """

    __tablename__ = "links"

    id: Optional[int] = Field(default=None, primary_key=True)
    clicks: int = Field(
        default=0,
        nullable=False,
        sa_column_kwargs={"server_default": text("0")},
        description="Number of successful redirects"
    )
    last_clicked_at: Optional[datetime] = Field(
        default=None,
        sa_type=UTCTimestamp,
        description="Timestamp of the most recent redirect"
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=UTCTimestamp,
        nullable=False,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
        description="Timestamp when this link was created"
    )

    __table_args__ = (
        # Newest-first listing
        Index("ix_links_created_at", "created_at"),
    )


class LinkCreate(LinkBase):
    """Schema for creating a new link."""
    pass
