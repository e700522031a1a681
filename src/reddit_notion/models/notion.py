"""Notion destination schema and typed property values.

The schema of a user's database is only known at call time, so it is kept
as a plain name -> PropertyKind mapping. Property values are a closed set of
small models that each know how to render their Notion wire payload.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

RICH_TEXT_LIMIT = 2000


def rich_text_spans(text: str, limit: int = RICH_TEXT_LIMIT) -> list[dict]:
    """Split text into rich_text objects respecting Notion's 2000-char limit."""
    if not text:
        return [{"type": "text", "text": {"content": ""}}]
    return [
        {"type": "text", "text": {"content": text[i : i + limit]}}
        for i in range(0, len(text), limit)
    ]


class PropertyKind(str, Enum):
    """Notion property types the mapper understands. Everything else is OTHER."""

    TITLE = "title"
    TEXT = "rich_text"
    NUMBER = "number"
    URL = "url"
    DATE = "date"
    OTHER = "other"

    @classmethod
    def from_notion(cls, type_name: str | None) -> "PropertyKind":
        """Map a Notion property `type` string onto a kind, unknown -> OTHER."""
        try:
            kind = cls(type_name)
        except ValueError:
            return cls.OTHER
        return kind


class TextValue(BaseModel):
    """Plain text for a title or rich_text property."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[PropertyKind.TITLE, PropertyKind.TEXT] = PropertyKind.TEXT
    text: str

    def to_notion(self) -> dict:
        return {self.kind.value: rich_text_spans(self.text)}


class NumberValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: float

    def to_notion(self) -> dict:
        return {"number": self.number}


class UrlValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str

    def to_notion(self) -> dict:
        return {"url": self.url}


class DateValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime

    def to_notion(self) -> dict:
        return {"date": {"start": self.start.isoformat()}}


PropertyValue = TextValue | NumberValue | UrlValue | DateValue


class DestinationSchema(BaseModel):
    """Snapshot of a Notion database's properties, fetched fresh per save."""

    model_config = ConfigDict(frozen=True)

    database_id: str
    title: str = ""
    properties: dict[str, PropertyKind] = {}

    @classmethod
    def from_notion(cls, database: dict) -> "DestinationSchema":
        """Build a schema from a `databases.retrieve` response."""
        title_items = database.get("title") or []
        title = "".join(item.get("plain_text", "") for item in title_items)
        properties = {
            name: PropertyKind.from_notion(config.get("type"))
            for name, config in (database.get("properties") or {}).items()
        }
        return cls(database_id=database["id"], title=title, properties=properties)
