"""Test utilities for TinyLink tests."""

import random
import string
from datetime import datetime
from typing import Any, Dict, Optional

from tinylink.models.link import Link


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8)}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


def create_test_link_data(
    original_url: Optional[str] = None,
    code: Optional[str] = None,
    clicks: int = 0,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Create test data dict for a Link."""
    data = {
        "original_url": original_url or random_url(),
        "code": code or random_string(6),
        "clicks": clicks,
    }
    if created_at is not None:
        data["created_at"] = created_at
    return data


async def create_test_link(
    db,
    original_url: Optional[str] = None,
    code: Optional[str] = None,
    clicks: int = 0,
    created_at: Optional[datetime] = None,
) -> Link:
    """Create and commit a test Link in the database."""
    link = Link(**create_test_link_data(
        original_url=original_url,
        code=code,
        clicks=clicks,
        created_at=created_at,
    ))
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link
