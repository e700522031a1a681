"""Schema-adaptive mapping of a Reddit post onto an unknown Notion database.

The destination schema is only known at save time. Each property is matched
by its kind plus substrings of its normalized name, using the ordered rule
table below: the first rule whose kind and name test both match supplies
the value. Title properties always receive the post title. Properties that
match no rule, and kinds the mapper does not know, are left unset.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import NamedTuple

from reddit_notion.models.notion import (
    DateValue,
    DestinationSchema,
    NumberValue,
    PropertyKind,
    PropertyValue,
    TextValue,
    UrlValue,
)
from reddit_notion.models.post import SavePostRequest

logger = logging.getLogger(__name__)


class _Rule(NamedTuple):
    kind: PropertyKind
    matches: Callable[[str], bool]
    value: Callable[[SavePostRequest, datetime], PropertyValue]


def _any_of(*needles: str) -> Callable[[str], bool]:
    return lambda name: any(n in name for n in needles)


def _all_of(*needles: str) -> Callable[[str], bool]:
    return lambda name: all(n in name for n in needles)


def _always(name: str) -> bool:
    return True


def _text(field: str) -> Callable[[SavePostRequest, datetime], PropertyValue]:
    return lambda post, now: TextValue(text=getattr(post, field))


_RULES: tuple[_Rule, ...] = (
    _Rule(PropertyKind.TITLE, _always, lambda post, now: TextValue(kind=PropertyKind.TITLE, text=post.title)),
    _Rule(PropertyKind.TEXT, _any_of("subreddit"), _text("subreddit")),
    _Rule(PropertyKind.TEXT, _any_of("author"), _text("author")),
    _Rule(PropertyKind.TEXT, _all_of("reddit", "id"), _text("reddit_id")),
    _Rule(PropertyKind.TEXT, _any_of("content"), _text("content")),
    _Rule(PropertyKind.NUMBER, _any_of("score", "upvote"), lambda post, now: NumberValue(number=post.score)),
    _Rule(PropertyKind.URL, _any_of("url", "link", "reddit"), lambda post, now: UrlValue(url=post.url)),
    _Rule(PropertyKind.DATE, _any_of("saved", "created", "date"), lambda post, now: DateValue(start=now)),
)


def normalize_property_name(name: str) -> str:
    """Lowercase and replace spaces with underscores: "Reddit ID" -> "reddit_id"."""
    return name.lower().replace(" ", "_")


def match_property(
    normalized_name: str,
    kind: PropertyKind,
    post: SavePostRequest,
    now: datetime,
) -> PropertyValue | None:
    """Return the value for one property, or None when no rule applies.

    Rules are tried in table order and the first match wins. A matching text
    rule whose source field is empty yields None rather than falling through
    to a later rule.
    """
    for rule in _RULES:
        if rule.kind is kind and rule.matches(normalized_name):
            value = rule.value(post, now)
            if isinstance(value, TextValue) and kind is PropertyKind.TEXT and not value.text:
                return None
            return value
    return None


def map_properties(
    schema: DestinationSchema,
    post: SavePostRequest,
    now: datetime | None = None,
) -> dict[str, PropertyValue]:
    """Map a post onto every property of ``schema`` that a rule matches.

    Pure function, no API calls. ``now`` defaults to the current UTC time
    and is shared by every date property of the page.
    """
    now = now or datetime.now(timezone.utc)
    mapped: dict[str, PropertyValue] = {}
    for name, kind in schema.properties.items():
        value = match_property(normalize_property_name(name), kind, post, now)
        if value is None:
            logger.debug("Property left unset: %s (%s)", name, kind.value)
            continue
        mapped[name] = value

    logger.info(
        "Mapped %d of %d properties for database %s",
        len(mapped),
        len(schema.properties),
        schema.database_id,
    )
    return mapped


def build_properties(mapped: dict[str, PropertyValue]) -> dict:
    """Render mapped values as the `properties` payload of pages.create()."""
    return {name: value.to_notion() for name, value in mapped.items()}
