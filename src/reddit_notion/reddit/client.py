"""Async client for Reddit's public JSON listings.

Reads are idempotent, so transient failures (network errors, 429, 5xx) are
retried with tenacity. fetch_feed fans out over several subreddits and skips
the ones that fail.
"""

import asyncio
import logging

import httpx
from pydantic import ValidationError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from reddit_notion.config import get_settings
from reddit_notion.models.post import REDDIT_BASE_URL, RedditPost

logger = logging.getLogger(__name__)

LISTING_SORTS = frozenset({"hot", "new", "top", "rising", "controversial"})
SEARCH_SORTS = frozenset({"relevance", "hot", "top", "new", "comments"})
TIME_RANGES = frozenset({"hour", "day", "week", "month", "year", "all"})

DEFAULT_LIMIT = 25
MAX_LIMIT = 100


def _is_retryable(error: BaseException) -> bool:
    """True for transport errors, rate limits (429) and server errors (5xx)."""
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status == 429 or status >= 500
    return False


def clamp_limit(limit: int | None) -> int:
    """Out-of-range limits fall back to the default of 25."""
    if limit is None or limit <= 0 or limit > MAX_LIMIT:
        return DEFAULT_LIMIT
    return limit


def clean_subreddits(raw: list[str] | str | None) -> list[str]:
    """Normalize user-entered subreddit names; empty input means r/all.

    Accepts a list or a comma-separated string, strips whitespace and any
    leading "r/" or "/r/".
    """
    if isinstance(raw, str):
        raw = raw.split(",")
    names = []
    for name in raw or []:
        name = name.strip().removeprefix("/").removeprefix("r/").strip("/").strip()
        if name:
            names.append(name)
    return names or ["all"]


def _parse_listing(payload: dict) -> list[RedditPost]:
    posts: list[RedditPost] = []
    for child in payload.get("data", {}).get("children", []):
        try:
            posts.append(RedditPost.model_validate(child.get("data", {})))
        except ValidationError:
            logger.warning("Skipping malformed listing entry (kind=%s)", child.get("kind"))
    return posts


class RedditClient:
    """Thin wrapper over httpx.AsyncClient. Use as an async context manager."""

    def __init__(
        self,
        user_agent: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._http = httpx.AsyncClient(
            base_url=REDDIT_BASE_URL,
            headers={"User-Agent": user_agent or settings.reddit_user_agent},
            timeout=httpx.Timeout(timeout_seconds or settings.reddit_timeout_seconds),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "RedditClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @retry(
        retry=retry_if_exception(_is_retryable),
        wait=wait_exponential_jitter(initial=0.5, max=4, jitter=0.5),
        stop=stop_after_attempt(3),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _get_listing(self, path: str, params: dict) -> list[RedditPost]:
        response = await self._http.get(path, params=params)
        response.raise_for_status()
        return _parse_listing(response.json())

    async def fetch_posts(
        self,
        subreddit: str = "all",
        sort: str = "hot",
        time_range: str = "",
        limit: int | None = DEFAULT_LIMIT,
        after: str = "",
    ) -> list[RedditPost]:
        """Fetch one page of a subreddit listing.

        ``time_range`` only applies to the top and controversial sorts.
        """
        sort = sort if sort in LISTING_SORTS else "hot"
        params: dict = {"limit": clamp_limit(limit)}
        if time_range in TIME_RANGES and sort in ("top", "controversial"):
            params["t"] = time_range
        if after:
            params["after"] = after
        return await self._get_listing(f"/r/{subreddit or 'all'}/{sort}.json", params)

    async def search_posts(
        self,
        subreddit: str,
        keyword: str,
        sort: str = "relevance",
        time_range: str = "",
        limit: int | None = DEFAULT_LIMIT,
    ) -> list[RedditPost]:
        """Search posts within one subreddit."""
        params: dict = {
            "q": keyword,
            "restrict_sr": "true",
            "sort": sort if sort in SEARCH_SORTS else "relevance",
            "limit": clamp_limit(limit),
        }
        if time_range in TIME_RANGES:
            params["t"] = time_range
        return await self._get_listing(f"/r/{subreddit or 'all'}/search.json", params)

    async def fetch_feed(
        self,
        subreddits: list[str] | str | None = None,
        keyword: str = "",
        sort: str = "hot",
        time_range: str = "",
        limit: int | None = DEFAULT_LIMIT,
    ) -> list[RedditPost]:
        """Fetch (or search, when ``keyword`` is set) several subreddits in parallel.

        Results keep subreddit order. A subreddit whose request fails is
        logged and skipped.
        """
        names = clean_subreddits(subreddits)
        keyword = keyword.strip()
        if keyword:
            requests = [self.search_posts(n, keyword, sort, time_range, limit) for n in names]
        else:
            requests = [self.fetch_posts(n, sort, time_range, limit) for n in names]

        results = await asyncio.gather(*requests, return_exceptions=True)

        posts: list[RedditPost] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.warning("Failed to fetch from r/%s: %s", name, result)
                continue
            logger.info("Fetched %d posts from r/%s", len(result), name)
            posts.extend(result)
        return posts
