"""Tests for the storage query helpers on a real SQLite database."""

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from reddit_notion.models.post import SavePostRequest
from reddit_notion.models.user import NotionIdentity
from reddit_notion.notion.models import PageResult
from reddit_notion.storage import repository
from reddit_notion.storage.orm import OAuthState, SavedPost, UserSession


def _identity(**overrides) -> NotionIdentity:
    defaults = {
        "notion_user_id": "notion-user-1",
        "name": "Reader",
        "email": "reader@example.com",
        "workspace_id": "ws-1",
        "workspace_name": "Acme",
        "bot_id": "bot-1",
    }
    defaults.update(overrides)
    return NotionIdentity(**defaults)


def _post(reddit_id: str = "abc", **overrides) -> SavePostRequest:
    defaults = {
        "title": "T",
        "subreddit": "r/x",
        "url": f"https://www.reddit.com/r/x/comments/{reddit_id}/t/",
        "reddit_id": reddit_id,
        "database_id": "db-123",
    }
    defaults.update(overrides)
    return SavePostRequest(**defaults)


def _page(page_id: str = "page-1") -> PageResult:
    return PageResult(page_id=page_id, page_url=f"https://www.notion.so/{page_id}", title="T")


# --- users ---


@pytest.mark.asyncio
async def test_upsert_user_creates_then_updates(db):
    created = await repository.upsert_user(db, _identity())
    await db.commit()

    updated = await repository.upsert_user(db, _identity(name="Renamed", email=""))
    await db.commit()

    assert updated.id == created.id
    assert updated.name == "Renamed"
    # an empty email never overwrites a known one
    assert updated.email == "reader@example.com"


@pytest.mark.asyncio
async def test_get_user_missing(db):
    assert await repository.get_user(db, 12345) is None


# --- sessions ---


@pytest.mark.asyncio
async def test_upsert_session_reuses_row(db):
    user = await repository.upsert_user(db, _identity())
    expires = repository.utcnow() + timedelta(days=30)

    first = await repository.upsert_session(db, user.id, "token-1", expires)
    second = await repository.upsert_session(db, user.id, "token-2", expires)
    await db.commit()

    assert first.id == second.id
    latest = await repository.get_latest_session(db, user.id)
    assert latest.access_token == "token-2"
    assert latest.token_type == "Bearer"


@pytest.mark.asyncio
async def test_get_latest_session_picks_latest_expiry(db):
    user = await repository.upsert_user(db, _identity())
    now = repository.utcnow()
    db.add(UserSession(user_id=user.id, access_token="old", expires_at=now + timedelta(days=1)))
    db.add(UserSession(user_id=user.id, access_token="new", expires_at=now + timedelta(days=5)))
    await db.commit()

    latest = await repository.get_latest_session(db, user.id)
    assert latest.access_token == "new"


@pytest.mark.asyncio
async def test_delete_sessions(db):
    user = await repository.upsert_user(db, _identity())
    await repository.upsert_session(db, user.id, "token", repository.utcnow() + timedelta(days=1))
    await db.commit()

    assert await repository.delete_sessions(db, user.id) == 1
    await db.commit()
    assert await repository.get_latest_session(db, user.id) is None


# --- saved posts ---


@pytest.mark.asyncio
async def test_record_saved_post_upserts(db):
    user = await repository.upsert_user(db, _identity())
    await repository.record_saved_post(db, user.id, _post(score=1), _page("page-1"))
    await repository.record_saved_post(db, user.id, _post(score=9), _page("page-2"))
    await db.commit()

    posts = await repository.list_saved_posts(db, user.id)
    assert len(posts) == 1
    assert posts[0].score == 9
    assert posts[0].notion_page_id == "page-2"
    assert posts[0].saved_at is not None


@pytest.mark.asyncio
async def test_saved_posts_scoped_per_user(db):
    alice = await repository.upsert_user(db, _identity(notion_user_id="alice"))
    bob = await repository.upsert_user(db, _identity(notion_user_id="bob"))
    await repository.record_saved_post(db, alice.id, _post("abc"), _page("page-a"))
    await repository.record_saved_post(db, bob.id, _post("abc"), _page("page-b"))
    await db.commit()

    assert (await repository.get_saved_post(db, alice.id, "abc")).notion_page_id == "page-a"
    assert (await repository.get_saved_post(db, bob.id, "abc")).notion_page_id == "page-b"


@pytest.mark.asyncio
async def test_list_saved_posts_newest_first(db):
    user = await repository.upsert_user(db, _identity())
    for reddit_id in ("first", "second", "third"):
        await repository.record_saved_post(db, user.id, _post(reddit_id), _page())
    await db.commit()

    posts = await repository.list_saved_posts(db, user.id)
    assert [p.reddit_id for p in posts] == ["third", "second", "first"]


@pytest.mark.asyncio
async def test_duplicate_saved_post_rejected_by_constraint(db):
    user = await repository.upsert_user(db, _identity())
    now = repository.utcnow()
    db.add(SavedPost(user_id=user.id, reddit_id="dup", subreddit="x", title="a", url="u", saved_at=now))
    db.add(SavedPost(user_id=user.id, reddit_id="dup", subreddit="x", title="b", url="u", saved_at=now))
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()


@pytest.mark.asyncio
async def test_delete_saved_post(db):
    user = await repository.upsert_user(db, _identity())
    saved = await repository.record_saved_post(db, user.id, _post(), _page())
    await db.commit()

    await repository.delete_saved_post(db, saved)
    await db.commit()

    assert await repository.get_saved_post(db, user.id, "abc") is None


# --- OAuth state ---


@pytest.mark.asyncio
async def test_oauth_state_single_use(db):
    state = await repository.create_oauth_state(db, timedelta(minutes=10))
    await db.commit()

    assert await repository.consume_oauth_state(db, state) is True
    assert await repository.consume_oauth_state(db, state) is False


@pytest.mark.asyncio
async def test_oauth_state_expired(db):
    state = await repository.create_oauth_state(db, timedelta(minutes=-1))
    await db.commit()

    assert await repository.consume_oauth_state(db, state) is False
    remaining = (await db.execute(select(OAuthState))).scalars().all()
    assert remaining == []


@pytest.mark.asyncio
async def test_oauth_state_empty(db):
    assert await repository.consume_oauth_state(db, "") is False
