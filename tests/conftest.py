"""Shared test fixtures."""

import os

os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("NOTION_CLIENT_ID", "test-client-id")
os.environ.setdefault("NOTION_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("NOTION_REDIRECT_URI", "http://testserver/api/auth/notion/callback")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from reddit_notion.app import app
from reddit_notion.auth.tokens import issue_token
from reddit_notion.storage.db import build_engine, get_db_session, init_db
from reddit_notion.storage.orm import Base, User, UserSession


@pytest_asyncio.fixture
async def db(tmp_path) -> AsyncSession:
    """An AsyncSession on a fresh SQLite file database with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'unit.db'}")
    await init_db(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def db_path(tmp_path):
    """SQLite file shared by the sync seeding engine and the app's async engine."""
    path = tmp_path / "app.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
def seed_user(db_path):
    """Insert a user with a Notion session. Returns (user_id, bearer headers)."""
    sync_engine = create_engine(f"sqlite:///{db_path}")
    with Session(sync_engine) as session:
        user = User(notion_user_id="notion-user-1", email="reader@example.com", name="Reader")
        session.add(user)
        session.flush()
        session.add(
            UserSession(
                user_id=user.id,
                access_token="secret-notion-token",
                expires_at=datetime.now(timezone.utc) + timedelta(days=30),
            )
        )
        session.commit()
        user_id = user.id
    sync_engine.dispose()
    token = issue_token(user_id, "reader@example.com")
    return user_id, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db_path) -> Iterator[TestClient]:
    """TestClient whose requests use the per-test SQLite database."""
    engine = build_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async def _override_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_db_session
    with patch("reddit_notion.app.init_db", new_callable=AsyncMock):
        with TestClient(app) as test_client:
            yield test_client
    app.dependency_overrides.clear()
