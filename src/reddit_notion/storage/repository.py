"""Query helpers over the ORM models.

Functions take an AsyncSession and only flush; committing is the caller's
decision. All timestamps are UTC.
"""

import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from reddit_notion.models.post import SavePostRequest
from reddit_notion.models.user import NotionIdentity
from reddit_notion.notion.models import PageResult
from reddit_notion.storage.orm import OAuthState, SavedPost, User, UserSession


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -- Users --


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def upsert_user(db: AsyncSession, identity: NotionIdentity) -> User:
    """Find a user by Notion id and refresh their profile, or create one."""
    result = await db.execute(
        select(User).where(User.notion_user_id == identity.notion_user_id)
    )
    user = result.scalar_one_or_none()
    if user is None:
        user = User(notion_user_id=identity.notion_user_id)
        db.add(user)

    user.workspace_id = identity.workspace_id
    user.workspace_name = identity.workspace_name
    user.bot_id = identity.bot_id
    user.name = identity.name
    user.avatar_url = identity.avatar_url
    if identity.email:
        user.email = identity.email
    await db.flush()
    return user


# -- Sessions --


async def get_latest_session(db: AsyncSession, user_id: int) -> UserSession | None:
    """Return the session with the latest expiry for ``user_id``, if any."""
    result = await db.execute(
        select(UserSession)
        .where(UserSession.user_id == user_id)
        .order_by(UserSession.expires_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def upsert_session(
    db: AsyncSession,
    user_id: int,
    access_token: str,
    expires_at: datetime,
) -> UserSession:
    """Store a fresh access token, reusing the user's latest session row."""
    session = await get_latest_session(db, user_id)
    if session is None:
        session = UserSession(user_id=user_id)
        db.add(session)
    session.access_token = access_token
    session.token_type = "Bearer"
    session.expires_at = expires_at
    await db.flush()
    return session


async def delete_sessions(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(delete(UserSession).where(UserSession.user_id == user_id))
    return result.rowcount or 0


# -- Saved posts --


async def record_saved_post(
    db: AsyncSession,
    user_id: int,
    post: SavePostRequest,
    page: PageResult,
) -> SavedPost:
    """Insert or refresh the local record of a saved post."""
    saved = await get_saved_post(db, user_id, post.reddit_id)
    if saved is None:
        saved = SavedPost(user_id=user_id, reddit_id=post.reddit_id)
        db.add(saved)

    saved.subreddit = post.subreddit
    saved.title = post.title
    saved.content = post.content
    saved.author = post.author
    saved.score = post.score
    saved.url = post.url
    saved.notion_page_id = page.page_id
    saved.notion_page_url = page.page_url
    saved.saved_at = utcnow()
    await db.flush()
    return saved


async def get_saved_post(db: AsyncSession, user_id: int, reddit_id: str) -> SavedPost | None:
    result = await db.execute(
        select(SavedPost).where(SavedPost.user_id == user_id, SavedPost.reddit_id == reddit_id)
    )
    return result.scalar_one_or_none()


async def list_saved_posts(db: AsyncSession, user_id: int) -> list[SavedPost]:
    """All saved posts of a user, newest first."""
    result = await db.execute(
        select(SavedPost)
        .where(SavedPost.user_id == user_id)
        .order_by(SavedPost.saved_at.desc(), SavedPost.id.desc())
    )
    return list(result.scalars().all())


async def delete_saved_post(db: AsyncSession, saved: SavedPost) -> None:
    await db.delete(saved)
    await db.flush()


# -- OAuth state --


async def create_oauth_state(db: AsyncSession, ttl: timedelta) -> str:
    """Persist a new random state nonce valid for ``ttl`` and return it."""
    state = secrets.token_urlsafe(32)
    db.add(OAuthState(state=state, expires_at=utcnow() + ttl))
    await db.flush()
    return state


async def consume_oauth_state(db: AsyncSession, state: str) -> bool:
    """Delete ``state`` if it exists and has not expired. True when it was valid.

    Expired nonces are purged on the way.
    """
    if not state:
        return False
    now = utcnow()
    await db.execute(delete(OAuthState).where(OAuthState.expires_at <= now))
    result = await db.execute(delete(OAuthState).where(OAuthState.state == state))
    return (result.rowcount or 0) > 0
