"""Tests for the save/delete workflows spanning Notion and local storage."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from reddit_notion.errors import NotFoundError, ServiceUnavailableError, UnauthenticatedError
from reddit_notion.models.post import SavePostRequest
from reddit_notion.models.user import NotionIdentity
from reddit_notion.notion.models import PageResult
from reddit_notion.saved import delete_saved_post, list_saved_posts, save_and_record
from reddit_notion.storage import repository

PAGE = PageResult(page_id="page-1", page_url="https://www.notion.so/page-1", title="T")


def _post(**overrides) -> SavePostRequest:
    defaults = {
        "title": "T",
        "subreddit": "r/x",
        "url": "https://www.reddit.com/r/x/comments/abc/t/",
        "reddit_id": "abc",
        "database_id": "db-123",
    }
    defaults.update(overrides)
    return SavePostRequest(**defaults)


@pytest_asyncio.fixture
async def user(db):
    """A signed-in user with a stored Notion access token."""
    user = await repository.upsert_user(db, NotionIdentity(notion_user_id="notion-user-1"))
    await repository.upsert_session(
        db, user.id, "secret-notion-token", repository.utcnow() + timedelta(days=30)
    )
    await db.commit()
    return user


@pytest.mark.asyncio
async def test_save_and_record(db, user):
    with patch("reddit_notion.saved.save_post", new_callable=AsyncMock, return_value=PAGE) as mock_save:
        result = await save_and_record(db, user, _post(), timeout_seconds=5)

    assert result == PAGE
    mock_save.assert_awaited_once_with(_post(), "secret-notion-token", timeout_seconds=5)
    posts = await list_saved_posts(db, user)
    assert [p.notion_page_id for p in posts] == ["page-1"]


@pytest.mark.asyncio
async def test_save_without_session_is_unauthenticated(db):
    user = await repository.upsert_user(db, NotionIdentity(notion_user_id="no-session"))
    await db.commit()

    with patch("reddit_notion.saved.save_post", new_callable=AsyncMock) as mock_save:
        with pytest.raises(UnauthenticatedError):
            await save_and_record(db, user, _post())

    mock_save.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_failure_records_nothing(db, user):
    with patch(
        "reddit_notion.saved.save_post",
        new_callable=AsyncMock,
        side_effect=ServiceUnavailableError(),
    ):
        with pytest.raises(ServiceUnavailableError):
            await save_and_record(db, user, _post())

    assert await list_saved_posts(db, user) == []


@pytest.mark.asyncio
async def test_local_write_failure_is_swallowed(db, user):
    with (
        patch("reddit_notion.saved.save_post", new_callable=AsyncMock, return_value=PAGE),
        patch(
            "reddit_notion.saved.repository.record_saved_post",
            new_callable=AsyncMock,
            side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
        ),
    ):
        result = await save_and_record(db, user, _post())

    assert result.page_id == "page-1"


@pytest.mark.asyncio
async def test_delete_saved_post_removes_page_and_record(db, user):
    await repository.record_saved_post(db, user.id, _post(), PAGE)
    await db.commit()

    with patch("reddit_notion.saved.delete_page", new_callable=AsyncMock) as mock_delete:
        await delete_saved_post(db, user, "abc", timeout_seconds=5)

    mock_delete.assert_awaited_once_with("page-1", "secret-notion-token", timeout_seconds=5)
    assert await repository.get_saved_post(db, user.id, "abc") is None


@pytest.mark.asyncio
async def test_delete_remote_failure_still_removes_record(db, user):
    await repository.record_saved_post(db, user.id, _post(), PAGE)
    await db.commit()

    with patch(
        "reddit_notion.saved.delete_page",
        new_callable=AsyncMock,
        side_effect=ServiceUnavailableError(),
    ):
        await delete_saved_post(db, user, "abc")

    assert await repository.get_saved_post(db, user.id, "abc") is None


@pytest.mark.asyncio
async def test_delete_without_session_still_removes_record(db, user):
    await repository.record_saved_post(db, user.id, _post(), PAGE)
    await repository.delete_sessions(db, user.id)
    await db.commit()

    with patch("reddit_notion.saved.delete_page", new_callable=AsyncMock) as mock_delete:
        await delete_saved_post(db, user, "abc")

    mock_delete.assert_not_awaited()
    assert await repository.get_saved_post(db, user.id, "abc") is None


@pytest.mark.asyncio
async def test_delete_unknown_post(db, user):
    with pytest.raises(NotFoundError):
        await delete_saved_post(db, user, "missing")
