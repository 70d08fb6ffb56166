"""Tests for the link repository."""

import pytest
from datetime import timedelta

from tinylink.models.link import LinkCreate, utcnow
from tinylink.repositories.base import DuplicateEntityError
from tinylink.repositories.link_repository import LinkRepository
from tests.utils import create_test_link, random_url


@pytest.mark.repository
class TestLinkRepository:
    """Test suite for link repository."""

    @pytest.fixture
    def link_repository(self):
        """Return link repository instance."""
        return LinkRepository()

    @pytest.mark.asyncio
    async def test_create_link(self, test_db, link_repository):
        """Test link creation."""
        test_url = random_url()

        link = await link_repository.create_link(
            db=test_db,
            data=LinkCreate(original_url=test_url, code="create1")
        )

        assert link.id is not None
        assert link.original_url == test_url
        assert link.code == "create1"
        assert link.clicks == 0
        assert link.last_clicked_at is None

        db_link = await link_repository.get_by_code(test_db, "create1")
        assert db_link is not None
        assert db_link.original_url == test_url

    @pytest.mark.asyncio
    async def test_create_link_from_dict(self, test_db, link_repository):
        link = await link_repository.create_link(
            test_db, {"original_url": "https://example.com", "code": "dict123"}
        )
        assert link.code == "dict123"

    @pytest.mark.asyncio
    async def test_create_duplicate_code(self, test_db, link_repository):
        """Test duplicate code handling."""
        await create_test_link(test_db, code="dupe123")

        with pytest.raises(DuplicateEntityError) as excinfo:
            await link_repository.create_link(
                db=test_db,
                data=LinkCreate(original_url=random_url(), code="dupe123")
            )

        assert excinfo.value.field_name == "code"
        assert excinfo.value.value == "dupe123"

    @pytest.mark.asyncio
    async def test_get_by_code(self, test_db, link_repository):
        """Test link retrieval by code."""
        test_link = await create_test_link(test_db, code="lookup1")

        db_link = await link_repository.get_by_code(test_db, "lookup1")

        assert db_link is not None
        assert db_link.id == test_link.id
        assert db_link.original_url == test_link.original_url

    @pytest.mark.asyncio
    async def test_get_by_code_not_found(self, test_db, link_repository):
        assert await link_repository.get_by_code(test_db, "nothere") is None

    @pytest.mark.asyncio
    async def test_get_all_links_newest_first(self, test_db, link_repository):
        now = utcnow()
        for i in range(5):
            await create_test_link(
                test_db,
                code=f"order{i}x",
                created_at=now - timedelta(minutes=i)
            )

        links = await link_repository.get_all_links(test_db)

        assert [link.code for link in links] == [f"order{i}x" for i in range(5)]

    @pytest.mark.asyncio
    async def test_get_all_links_ties_broken_by_id(self, test_db, link_repository):
        now = utcnow()
        first = await create_test_link(test_db, code="tie0001", created_at=now)
        second = await create_test_link(test_db, code="tie0002", created_at=now)

        links = await link_repository.get_all_links(test_db)

        assert [link.id for link in links] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_check_code_exists(self, test_db, link_repository):
        await create_test_link(test_db, code="exists1")

        assert await link_repository.check_code_exists(test_db, "exists1") is True
        assert await link_repository.check_code_exists(test_db, "Exists1") is False
        assert await link_repository.check_code_exists(test_db, "missing") is False

    @pytest.mark.asyncio
    async def test_increment_clicks(self, test_db, link_repository):
        test_link = await create_test_link(test_db, code="clicks1", clicks=5)
        before = utcnow()

        link = await link_repository.increment_clicks(test_db, "clicks1")
        await test_db.commit()

        assert link is not None
        assert link.id == test_link.id
        assert link.clicks == 6
        assert link.last_clicked_at is not None
        assert link.last_clicked_at >= before

    @pytest.mark.asyncio
    async def test_increment_clicks_not_found(self, test_db, link_repository):
        assert await link_repository.increment_clicks(test_db, "nothere") is None

    @pytest.mark.asyncio
    async def test_increment_leaves_other_links_alone(self, test_db, link_repository):
        await create_test_link(test_db, code="target1")
        await create_test_link(test_db, code="bystand")

        await link_repository.increment_clicks(test_db, "target1")
        await test_db.commit()

        bystander = await link_repository.get_by_code(test_db, "bystand")
        assert bystander.clicks == 0
        assert bystander.last_clicked_at is None

    @pytest.mark.asyncio
    async def test_delete_by_code(self, test_db, link_repository):
        await create_test_link(test_db, code="delete1")

        assert await link_repository.delete_by_code(test_db, "delete1") is True
        await test_db.commit()

        assert await link_repository.get_by_code(test_db, "delete1") is None
        assert await link_repository.check_code_exists(test_db, "delete1") is False

    @pytest.mark.asyncio
    async def test_delete_by_code_not_found(self, test_db, link_repository):
        assert await link_repository.delete_by_code(test_db, "nothere") is False
