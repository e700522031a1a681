"""FastAPI dependencies resolving the caller and their Notion credential."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reddit_notion.auth.tokens import decode_token
from reddit_notion.errors import UnauthenticatedError
from reddit_notion.storage import repository
from reddit_notion.storage.db import get_db_session
from reddit_notion.storage.orm import User

AUTH_COOKIE = "auth_token"


def extract_token(request: Request) -> str | None:
    """Return the session token from the auth cookie or a Bearer header."""
    token = request.cookies.get(AUTH_COOKIE)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Resolve the signed-in user or raise UnauthenticatedError (401)."""
    token = extract_token(request)
    if not token:
        raise UnauthenticatedError("Authentication required")
    claims = decode_token(token)
    user = await repository.get_user(db, claims.user_id)
    if user is None:
        raise UnauthenticatedError("User not found")
    return user


async def get_access_token(db: AsyncSession, user: User) -> str:
    """Return the user's most recent Notion access token.

    Raises UnauthenticatedError when the user has no stored session, which
    tells the client to sign in again.
    """
    session = await repository.get_latest_session(db, user.id)
    if session is None:
        raise UnauthenticatedError("No valid session found. Please login again.")
    return session.access_token
