"""Local persistence: users, Notion sessions, saved posts and OAuth state."""

from reddit_notion.storage.db import get_db_session, init_db
from reddit_notion.storage.orm import Base, OAuthState, SavedPost, User, UserSession

__all__ = [
    "Base",
    "get_db_session",
    "init_db",
    "OAuthState",
    "SavedPost",
    "User",
    "UserSession",
]
