"""Reddit browsing route."""

import logging

from fastapi import APIRouter, Depends

from reddit_notion.auth.dependencies import get_current_user
from reddit_notion.errors import MalformedInputError
from reddit_notion.reddit.client import LISTING_SORTS, SEARCH_SORTS, RedditClient
from reddit_notion.storage.orm import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reddit", tags=["reddit"])


@router.get("/posts")
async def get_posts(
    subreddits: str = "",
    keyword: str = "",
    sort: str = "hot",
    date_range: str = "",
    limit: int = 25,
    user: User = Depends(get_current_user),
) -> dict:
    """Fetch posts from a comma-separated list of subreddits, optionally by keyword."""
    if sort not in LISTING_SORTS | SEARCH_SORTS:
        raise MalformedInputError(f"Unsupported sort: {sort}")

    logger.info(
        "Fetching posts for user %s: subreddits=%r keyword=%r sort=%s range=%s limit=%d",
        user.id,
        subreddits,
        keyword,
        sort,
        date_range,
        limit,
    )
    async with RedditClient() as reddit:
        posts = await reddit.fetch_feed(subreddits, keyword, sort, date_range, limit)

    logger.info("Total posts fetched: %d", len(posts))
    return {
        "posts": [post.model_dump() | {"permalink_url": post.permalink_url} for post in posts],
        "count": len(posts),
    }
