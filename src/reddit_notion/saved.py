"""Saved-post workflows spanning Notion and the local store.

The Notion page is the source of truth for a save, the local row is the
user's list of saved items. So a local write failing after a successful
save is only logged, and a delete always removes the local row even when
Notion cannot be reached.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reddit_notion.auth.dependencies import get_access_token
from reddit_notion.errors import NotFoundError, ServiceError
from reddit_notion.models.post import SavePostRequest
from reddit_notion.notion.models import PageResult
from reddit_notion.notion.service import delete_page, save_post
from reddit_notion.storage import repository
from reddit_notion.storage.orm import SavedPost, User

logger = logging.getLogger(__name__)


async def save_and_record(
    db: AsyncSession,
    user: User,
    post: SavePostRequest,
    *,
    timeout_seconds: float | None = None,
) -> PageResult:
    """Save ``post`` to Notion, then record it locally on a best-effort basis."""
    access_token = await get_access_token(db, user)
    result = await save_post(post, access_token, timeout_seconds=timeout_seconds)

    try:
        await repository.record_saved_post(db, user.id, post, result)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.error(
            "Saved post %s to Notion (%s) but failed to record it locally",
            post.reddit_id,
            result.page_id,
            exc_info=True,
        )
    else:
        logger.info("Recorded saved post %s for user %s", post.reddit_id, user.id)

    return result


async def delete_saved_post(
    db: AsyncSession,
    user: User,
    reddit_id: str,
    *,
    timeout_seconds: float | None = None,
) -> None:
    """Remove a saved post locally, archiving its Notion page when possible.

    Raises NotFoundError when the user has no saved post with ``reddit_id``.
    """
    saved = await repository.get_saved_post(db, user.id, reddit_id)
    if saved is None:
        raise NotFoundError("Post not found")

    if saved.notion_page_id:
        await _delete_remote_page(db, user, saved, timeout_seconds)

    await repository.delete_saved_post(db, saved)
    await db.commit()
    logger.info("Deleted saved post %s for user %s", reddit_id, user.id)


async def _delete_remote_page(
    db: AsyncSession,
    user: User,
    saved: SavedPost,
    timeout_seconds: float | None,
) -> None:
    try:
        access_token = await get_access_token(db, user)
        await delete_page(saved.notion_page_id, access_token, timeout_seconds=timeout_seconds)
    except ServiceError as exc:
        logger.warning(
            "Failed to delete Notion page %s (continuing with local deletion): %s",
            saved.notion_page_id,
            exc.detail,
        )
    else:
        logger.info("Deleted Notion page %s", saved.notion_page_id)


async def list_saved_posts(db: AsyncSession, user: User) -> list[SavedPost]:
    posts = await repository.list_saved_posts(db, user.id)
    logger.info("Found %d saved posts for user %s", len(posts), user.id)
    return posts
