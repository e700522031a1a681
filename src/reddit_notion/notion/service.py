"""Notion operations performed on behalf of a signed-in user.

save_post wires schema discovery, property mapping, block building and the
Notion API calls into a single function. Exactly one pages.create call is
made per save and nothing is retried: page creation is not idempotent.
Errors from notion_client are classified into reddit_notion.errors types.
"""

import asyncio
import logging

import httpx
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from pydantic import ValidationError

from reddit_notion.errors import MalformedInputError, from_notion_error
from reddit_notion.models.notion import DestinationSchema, PropertyKind
from reddit_notion.models.post import SavePostRequest
from reddit_notion.notion.blocks import build_blocks
from reddit_notion.notion.client import notion_session
from reddit_notion.notion.models import DatabaseSummary, PageResult
from reddit_notion.notion.properties import build_properties, map_properties

logger = logging.getLogger(__name__)

_BLOCK_BATCH_SIZE = 100

# HTTPResponseError also covers APIResponseError
_NOTION_ERRORS = (HTTPResponseError, RequestTimeoutError, httpx.HTTPError, TimeoutError)

REDDIT_DATABASE_TITLE = "Reddit Posts"
REDDIT_DATABASE_PROPERTIES: dict[str, PropertyKind] = {
    "Title": PropertyKind.TITLE,
    "Subreddit": PropertyKind.TEXT,
    "Author": PropertyKind.TEXT,
    "Score": PropertyKind.NUMBER,
    "Reddit URL": PropertyKind.URL,
    "Reddit ID": PropertyKind.TEXT,
    "Saved At": PropertyKind.DATE,
}


async def fetch_schema(client: AsyncClient, database_id: str) -> DestinationSchema:
    """Retrieve the current property schema of a database. Never cached."""
    database = await client.databases.retrieve(database_id=database_id)
    schema = DestinationSchema.from_notion(database)
    logger.info(
        "Loaded schema for database %s with %d properties",
        database_id,
        len(schema.properties),
    )
    return schema


async def save_post(
    post: SavePostRequest,
    access_token: str,
    *,
    timeout_seconds: float | None = None,
) -> PageResult:
    """Create a Notion page for ``post`` in its target database.

    Steps:
    1. Fetch the database schema
    2. Map post fields onto the schema's properties
    3. Build body blocks from the post content
    4. Create the page with the first 100 blocks
    5. Append any overflow blocks in batches of 100

    ``timeout_seconds`` bounds steps 1-4; expiry raises ServiceUnavailableError.
    Overflow append failures are logged only, since the page already exists.

    Raises:
        ServiceError: classified failure of the schema fetch or page create.
        MalformedInputError: Notion returned a schema or page the models reject.
    """
    logger.info("Saving post %s to Notion database %s", post.reddit_id, post.database_id)

    async with notion_session(access_token) as client:
        try:
            async with asyncio.timeout(timeout_seconds):
                schema = await fetch_schema(client, post.database_id)
                properties = build_properties(map_properties(schema, post))
                blocks = build_blocks(post.content, post.url)
                created_page = await client.pages.create(
                    parent={"type": "database_id", "database_id": post.database_id},
                    properties=properties,
                    children=blocks[:_BLOCK_BATCH_SIZE],
                )
            result = PageResult(
                page_id=created_page.get("id"),
                page_url=created_page.get("url"),
                title=post.title,
            )
        except _NOTION_ERRORS as exc:
            logger.warning("Failed to save post %s to Notion: %s", post.reddit_id, exc)
            raise from_notion_error(exc) from exc
        except ValidationError as exc:
            logger.warning("Unexpected Notion response saving post %s: %s", post.reddit_id, exc)
            raise MalformedInputError(
                f"Unexpected response from Notion: {exc.error_count()} invalid field(s)"
            ) from exc

        await _append_overflow(client, result.page_id, blocks[_BLOCK_BATCH_SIZE:])

    logger.info("Created Notion page: %s (%s)", post.title, result.page_id)
    return result


async def _append_overflow(client: AsyncClient, page_id: str, overflow: list[dict]) -> None:
    """Append blocks beyond the first batch. Stops at the first failed batch."""
    for i in range(0, len(overflow), _BLOCK_BATCH_SIZE):
        batch = overflow[i : i + _BLOCK_BATCH_SIZE]
        try:
            await client.blocks.children.append(block_id=page_id, children=batch)
        except _NOTION_ERRORS as exc:
            logger.warning(
                "Failed to append %d overflow blocks to page %s: %s",
                len(overflow) - i,
                page_id,
                exc,
            )
            return


async def delete_page(
    page_id: str,
    access_token: str,
    *,
    timeout_seconds: float | None = None,
) -> None:
    """Archive a Notion page (the API has no hard delete)."""
    logger.info("Deleting Notion page %s", page_id)
    async with notion_session(access_token) as client:
        try:
            async with asyncio.timeout(timeout_seconds):
                await client.blocks.delete(block_id=page_id)
        except _NOTION_ERRORS as exc:
            raise from_notion_error(exc) from exc


def _plain_title(database: dict) -> str:
    title_items = database.get("title") or []
    title = "".join(item.get("plain_text", "") for item in title_items)
    return title or "Untitled"


async def list_databases(
    access_token: str,
    *,
    timeout_seconds: float | None = None,
) -> list[DatabaseSummary]:
    """Return every database shared with the integration, following pagination."""
    databases: list[DatabaseSummary] = []
    start_cursor: str | None = None

    async with notion_session(access_token) as client:
        try:
            async with asyncio.timeout(timeout_seconds):
                while True:
                    kwargs: dict = {"filter": {"property": "object", "value": "database"}}
                    if start_cursor:
                        kwargs["start_cursor"] = start_cursor

                    response = await client.search(**kwargs)
                    for result in response.get("results", []):
                        if result.get("object") != "database":
                            continue
                        databases.append(
                            DatabaseSummary(
                                id=result["id"],
                                title=_plain_title(result),
                                url=result.get("url", ""),
                            )
                        )

                    if response.get("has_more"):
                        start_cursor = response.get("next_cursor")
                    else:
                        break
        except _NOTION_ERRORS as exc:
            raise from_notion_error(exc) from exc

    logger.info("Found %d databases", len(databases))
    return databases


async def create_reddit_database(
    parent_page_id: str,
    access_token: str,
    *,
    timeout_seconds: float | None = None,
) -> DatabaseSummary:
    """Create a database under ``parent_page_id`` whose schema fits saved posts."""
    logger.info("Creating %s database in page %s", REDDIT_DATABASE_TITLE, parent_page_id)
    properties = {name: {kind.value: {}} for name, kind in REDDIT_DATABASE_PROPERTIES.items()}

    async with notion_session(access_token) as client:
        try:
            async with asyncio.timeout(timeout_seconds):
                database = await client.databases.create(
                    parent={"type": "page_id", "page_id": parent_page_id},
                    title=[{"type": "text", "text": {"content": REDDIT_DATABASE_TITLE}}],
                    properties=properties,
                )
        except _NOTION_ERRORS as exc:
            raise from_notion_error(exc) from exc

    logger.info("Created database %s", database["id"])
    return DatabaseSummary(
        id=database["id"],
        title=REDDIT_DATABASE_TITLE,
        url=database.get("url", ""),
    )
