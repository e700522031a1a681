"""Notion output: schema-adaptive page creation and database management."""

from reddit_notion.notion.blocks import build_blocks, split_text_into_chunks
from reddit_notion.notion.client import create_notion_client, notion_session
from reddit_notion.notion.models import DatabaseSummary, PageResult
from reddit_notion.notion.properties import (
    build_properties,
    map_properties,
    match_property,
    normalize_property_name,
)
from reddit_notion.notion.service import (
    create_reddit_database,
    delete_page,
    fetch_schema,
    list_databases,
    save_post,
)

__all__ = [
    "build_blocks",
    "build_properties",
    "create_notion_client",
    "create_reddit_database",
    "DatabaseSummary",
    "delete_page",
    "fetch_schema",
    "list_databases",
    "map_properties",
    "match_property",
    "normalize_property_name",
    "notion_session",
    "PageResult",
    "save_post",
    "split_text_into_chunks",
]
