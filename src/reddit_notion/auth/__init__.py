"""Notion OAuth sign-in and session tokens."""

from reddit_notion.auth.dependencies import get_access_token, get_current_user
from reddit_notion.auth.tokens import TokenClaims, decode_token, issue_token

__all__ = [
    "decode_token",
    "get_access_token",
    "get_current_user",
    "issue_token",
    "TokenClaims",
]
