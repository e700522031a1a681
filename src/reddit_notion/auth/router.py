"""Sign-in routes: Notion OAuth login/callback, current user, logout."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from reddit_notion.auth.dependencies import AUTH_COOKIE, extract_token, get_current_user
from reddit_notion.auth.notion_oauth import build_authorize_url, exchange_code
from reddit_notion.auth.tokens import decode_token, issue_token
from reddit_notion.config import get_settings
from reddit_notion.errors import MalformedInputError, UnauthenticatedError
from reddit_notion.storage import repository
from reddit_notion.storage.db import get_db_session
from reddit_notion.storage.orm import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/notion/login")
async def notion_login(db: AsyncSession = Depends(get_db_session)) -> dict:
    """Start the OAuth flow: persist a state nonce and return the consent URL."""
    settings = get_settings()
    state = await repository.create_oauth_state(
        db, timedelta(minutes=settings.oauth_state_ttl_minutes)
    )
    await db.commit()
    return {"url": build_authorize_url(state)}


@router.get("/notion/callback")
async def notion_callback(
    state: str = "",
    code: str = "",
    error: str = "",
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    """Finish the OAuth flow and redirect to the frontend with a session cookie.

    The state nonce is consumed before anything else so it can never be
    replayed, even when the code exchange fails.
    """
    if error:
        logger.warning("OAuth error parameter: %s", error)
        raise MalformedInputError(f"Notion authorization failed: {error}")

    state_valid = await repository.consume_oauth_state(db, state)
    await db.commit()
    if not state_valid:
        logger.warning("Invalid or expired OAuth state")
        raise MalformedInputError("invalid state parameter")
    if not code:
        raise MalformedInputError("missing authorization code")

    token = await exchange_code(code)
    identity = token.identity()

    settings = get_settings()
    user = await repository.upsert_user(db, identity)
    await repository.upsert_session(
        db,
        user.id,
        token.access_token,
        repository.utcnow() + timedelta(days=settings.session_ttl_days),
    )
    await db.commit()
    logger.info("User %s signed in (workspace %s)", user.id, identity.workspace_id)

    response = RedirectResponse(
        f"{settings.frontend_url}/dashboard?auth=success", status_code=307
    )
    response.set_cookie(
        AUTH_COOKIE,
        issue_token(user.id, user.email),
        max_age=settings.jwt_ttl_hours * 3600,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/user")
async def current_user(user: User = Depends(get_current_user)) -> dict:
    return {"user": user.to_dict()}


@router.post("/logout")
async def logout(request: Request, db: AsyncSession = Depends(get_db_session)) -> JSONResponse:
    """Drop the user's Notion sessions (when the token is valid) and clear the cookie."""
    token = extract_token(request)
    if not token:
        return JSONResponse({"message": "already logged out"})

    try:
        claims = decode_token(token)
    except UnauthenticatedError:
        logger.info("Logout with invalid token, clearing cookie only")
    else:
        removed = await repository.delete_sessions(db, claims.user_id)
        await db.commit()
        logger.info("Removed %d session(s) for user %s", removed, claims.user_id)

    response = JSONResponse({"message": "logged out successfully"})
    response.delete_cookie(AUTH_COOKIE)
    return response
