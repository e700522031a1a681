"""Reddit feed retrieval."""

from reddit_notion.reddit.client import RedditClient, clamp_limit, clean_subreddits

__all__ = ["clamp_limit", "clean_subreddits", "RedditClient"]
