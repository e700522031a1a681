"""Data models for Reddit posts and Notion destinations."""

from reddit_notion.models.notion import (
    DateValue,
    DestinationSchema,
    NumberValue,
    PropertyKind,
    PropertyValue,
    TextValue,
    UrlValue,
)
from reddit_notion.models.post import RedditPost, SavePostRequest
from reddit_notion.models.user import NotionIdentity

__all__ = [
    "DateValue",
    "DestinationSchema",
    "NotionIdentity",
    "NumberValue",
    "PropertyKind",
    "PropertyValue",
    "RedditPost",
    "SavePostRequest",
    "TextValue",
    "UrlValue",
]
