"""Tests for DestinationSchema and rich text spans."""

from reddit_notion.models.notion import (
    DestinationSchema,
    PropertyKind,
    rich_text_spans,
)


def test_schema_from_notion():
    database = {
        "id": "db-123",
        "title": [{"plain_text": "Reading "}, {"plain_text": "list"}],
        "properties": {
            "Name": {"id": "title", "type": "title", "title": {}},
            "Score": {"id": "a", "type": "number", "number": {}},
            "Notes": {"id": "b", "type": "rich_text", "rich_text": {}},
            "Tags": {"id": "c", "type": "multi_select", "multi_select": {}},
            "When": {"id": "d", "type": "date", "date": {}},
            "Link": {"id": "e", "type": "url", "url": {}},
        },
    }
    schema = DestinationSchema.from_notion(database)
    assert schema.database_id == "db-123"
    assert schema.title == "Reading list"
    assert schema.properties == {
        "Name": PropertyKind.TITLE,
        "Score": PropertyKind.NUMBER,
        "Notes": PropertyKind.TEXT,
        "Tags": PropertyKind.OTHER,
        "When": PropertyKind.DATE,
        "Link": PropertyKind.URL,
    }


def test_schema_from_notion_without_properties():
    schema = DestinationSchema.from_notion({"id": "db-123"})
    assert schema.properties == {}
    assert schema.title == ""


def test_property_kind_unknown_is_other():
    assert PropertyKind.from_notion("formula") is PropertyKind.OTHER
    assert PropertyKind.from_notion(None) is PropertyKind.OTHER


def test_rich_text_spans_empty():
    assert rich_text_spans("") == [{"type": "text", "text": {"content": ""}}]


def test_rich_text_spans_split_at_limit():
    spans = rich_text_spans("abcdefg", limit=3)
    assert [s["text"]["content"] for s in spans] == ["abc", "def", "g"]
