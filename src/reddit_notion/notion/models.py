"""Result types for Notion operations."""

from pydantic import BaseModel


class PageResult(BaseModel):
    """Returned after successful Notion page creation."""

    page_id: str
    page_url: str
    title: str


class DatabaseSummary(BaseModel):
    """A Notion database the integration can write to."""

    id: str
    title: str
    url: str = ""
