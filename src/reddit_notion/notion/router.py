"""Notion routes: save a post, manage saved posts, list and create databases."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from reddit_notion.auth.dependencies import get_access_token, get_current_user
from reddit_notion.config import get_settings
from reddit_notion.models.post import SavePostRequest
from reddit_notion.notion.service import create_reddit_database, list_databases
from reddit_notion.saved import delete_saved_post, list_saved_posts, save_and_record
from reddit_notion.storage.db import get_db_session
from reddit_notion.storage.orm import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notion", tags=["notion"])


class CreateDatabaseRequest(BaseModel):
    parent_page_id: str = Field(min_length=1)


@router.post("/save")
async def save(
    post: SavePostRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Save a Reddit post as a page in the chosen Notion database."""
    logger.info("Saving post %s to database %s", post.reddit_id, post.database_id)
    result = await save_and_record(
        db, user, post, timeout_seconds=get_settings().notion_timeout_seconds
    )
    return {
        "success": True,
        "notion_page_id": result.page_id,
        "notion_page_url": result.page_url,
        "message": "Post saved to Notion successfully",
    }


@router.get("/databases")
async def databases(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    access_token = await get_access_token(db, user)
    found = await list_databases(
        access_token, timeout_seconds=get_settings().notion_timeout_seconds
    )
    return {"databases": [d.model_dump() for d in found]}


@router.get("/saved-posts")
async def saved_posts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    posts = await list_saved_posts(db, user)
    return {"posts": [p.to_dict() for p in posts]}


@router.delete("/saved-posts/{reddit_id}")
async def delete_saved(
    reddit_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Delete a saved post; the Notion page is archived when Notion allows it."""
    await delete_saved_post(
        db, user, reddit_id, timeout_seconds=get_settings().notion_timeout_seconds
    )
    return {"success": True, "message": "Post deleted successfully"}


@router.post("/create-database")
async def create_database(
    body: CreateDatabaseRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Create a "Reddit Posts" database with a ready-made schema under a page."""
    access_token = await get_access_token(db, user)
    database = await create_reddit_database(
        body.parent_page_id,
        access_token,
        timeout_seconds=get_settings().notion_timeout_seconds,
    )
    return {
        "success": True,
        "database_id": database.id,
        "database_url": database.url,
        "message": "Reddit Posts database created successfully",
    }
