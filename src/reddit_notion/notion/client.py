"""Per-user async Notion client factory.

Each request acts with the calling user's OAuth access token, so clients are
built per call and closed afterwards. Nothing is cached across requests.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from notion_client import AsyncClient

from reddit_notion.config import get_settings


def create_notion_client(access_token: str) -> AsyncClient:
    """Return a new async Notion client authenticated as the token's owner.

    Uses notion_version and notion_timeout_seconds from settings.
    """
    settings = get_settings()
    return AsyncClient(
        auth=access_token,
        notion_version=settings.notion_version,
        timeout_ms=int(settings.notion_timeout_seconds * 1000),
    )


@asynccontextmanager
async def notion_session(access_token: str) -> AsyncIterator[AsyncClient]:
    """Yield a Notion client for one request and close its HTTP pool on exit."""
    client = create_notion_client(access_token)
    try:
        yield client
    finally:
        await client.aclose()
