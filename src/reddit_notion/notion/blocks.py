"""Pure functions converting a Reddit post body into Notion block objects.

Every page starts with a bookmark back to the post and a divider, followed
by the body as paragraphs. Notion rejects rich_text content over 2000
characters, so long paragraphs are re-segmented on word boundaries.
The caller handles the 100-block batch limit.
"""

from reddit_notion.models.notion import RICH_TEXT_LIMIT

NO_CONTENT_TEXT = "No content available for this post."
MEDIA_LINK_LABEL = "Media Link: "

_MEDIA_PREFIXES = ("http://", "https://")
_BOUNDARY_CHARS = (" ", "\n")


def split_text_into_chunks(text: str, limit: int = RICH_TEXT_LIMIT) -> list[str]:
    """Split text into chunks of at most ``limit`` characters.

    Each cut is placed at the nearest space or newline at or before index
    ``limit``; when there is none the text is hard-cut at ``limit``. The
    boundary whitespace is stripped from the start of the remainder, so no
    chunk is empty and every other character appears exactly once.
    """
    if limit < 1:
        raise ValueError("limit must be positive")

    chunks: list[str] = []
    while text:
        if len(text) <= limit:
            chunks.append(text)
            break
        split_index = limit
        while split_index > 0 and text[split_index] not in _BOUNDARY_CHARS:
            split_index -= 1
        if split_index == 0:
            split_index = limit
        chunks.append(text[:split_index])
        text = text[split_index:].lstrip()
    return chunks


def _text_span(content: str, link: str | None = None) -> dict:
    text: dict = {"content": content}
    if link:
        text["link"] = {"url": link}
    return {"type": "text", "text": text}


def _paragraph_block(text: str) -> dict:
    """Create a paragraph block holding a single text span."""
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": [_text_span(text)]},
    }


def _media_link_block(content: str) -> dict:
    """Create a paragraph with a label followed by blue hyperlinked ``content``.

    The link target is the leading URL. Long content is spread over several
    linked spans of at most 2000 characters within the same paragraph.
    """
    link = content.split(maxsplit=1)[0][:RICH_TEXT_LIMIT]
    rich_text = [_text_span(MEDIA_LINK_LABEL)]
    for start in range(0, len(content), RICH_TEXT_LIMIT):
        span = _text_span(content[start : start + RICH_TEXT_LIMIT], link=link)
        span["annotations"] = {"color": "blue"}
        rich_text.append(span)
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": rich_text},
    }


def _bookmark_block(url: str) -> dict:
    return {"object": "block", "type": "bookmark", "bookmark": {"url": url}}


def _divider_block() -> dict:
    """Create a divider block."""
    return {"object": "block", "type": "divider", "divider": {}}


def _split_paragraphs(content: str) -> list[str]:
    """Split on blank lines, falling back to single newlines. Drops empty pieces."""
    paragraphs = content.split("\n\n")
    if len(paragraphs) == 1:
        paragraphs = content.split("\n")
    stripped = (p.strip() for p in paragraphs)
    return [p for p in stripped if p]


def build_blocks(content: str, url: str) -> list[dict]:
    """Build the page body for a saved post as a list of Notion block dicts.

    Layout:
    1. Bookmark to ``url`` and a divider (always present)
    2. A placeholder paragraph when ``content`` is empty or blank, or
    3. A single "Media Link" paragraph when ``content`` is itself a URL, or
    4. One paragraph per body paragraph, long ones split into <=2000-char chunks

    Returns list[dict]. Caller handles the 100-block batch limit.
    """
    blocks: list[dict] = [_bookmark_block(url), _divider_block()]

    if not content:
        blocks.append(_paragraph_block(NO_CONTENT_TEXT))
        return blocks

    if content.startswith(_MEDIA_PREFIXES):
        blocks.append(_media_link_block(content))
        return blocks

    paragraphs = _split_paragraphs(content)
    if not paragraphs:
        # Whitespace-only body
        blocks.append(_paragraph_block(NO_CONTENT_TEXT))
        return blocks

    for paragraph in paragraphs:
        if len(paragraph) > RICH_TEXT_LIMIT:
            blocks.extend(_paragraph_block(chunk) for chunk in split_text_into_chunks(paragraph))
        else:
            blocks.append(_paragraph_block(paragraph))

    return blocks
