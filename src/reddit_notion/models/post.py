"""Reddit post models: feed items and the request to save one into Notion."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

REDDIT_BASE_URL = "https://www.reddit.com"


class SavePostRequest(BaseModel):
    """A Reddit post the user wants saved into a Notion database.

    Immutable once built. Required fields must be non-blank; optional fields
    default to empty values.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    subreddit: str = Field(min_length=1)
    content: str = ""
    author: str = ""
    score: int = 0
    url: str = Field(min_length=1)
    reddit_id: str = Field(min_length=1)
    database_id: str = Field(min_length=1)

    @field_validator("title", "subreddit", "url", "reddit_id", "database_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class RedditPost(BaseModel):
    """A single post from a Reddit listing (the `data` object of a `t3` child)."""

    id: str
    title: str
    author: str = ""
    subreddit: str = ""
    score: int = 0
    url: str = ""
    permalink: str = ""
    created_utc: float = 0.0
    num_comments: int = 0
    thumbnail: str = ""
    selftext: str = ""
    is_video: bool = False

    @property
    def permalink_url(self) -> str:
        """Absolute link to the post's comment page."""
        if not self.permalink:
            return self.url
        return f"{REDDIT_BASE_URL}{self.permalink}"
