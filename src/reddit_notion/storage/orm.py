"""SQLAlchemy ORM models for users, Notion sessions, saved posts and OAuth state."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class User(Base):
    """A Notion user (or workspace bot) who signed in through OAuth."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    notion_user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    workspace_id: Mapped[str] = mapped_column(String(64), default="")
    workspace_name: Mapped[str] = mapped_column(String(255), default="")
    bot_id: Mapped[str] = mapped_column(String(64), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    name: Mapped[str] = mapped_column(String(255), default="")
    avatar_url: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "notion_user_id": self.notion_user_id,
            "workspace_id": self.workspace_id,
            "workspace_name": self.workspace_name,
            "email": self.email,
            "name": self.name,
            "avatar_url": self.avatar_url,
        }

    def __repr__(self) -> str:
        return f"<User(id={self.id}, notion_user_id='{self.notion_user_id}')>"


class UserSession(Base):
    """A Notion OAuth access token issued to a user."""

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    token_type: Mapped[str] = mapped_column(String(32), default="Bearer")
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class SavedPost(Base):
    """A Reddit post the user saved, with the Notion page it produced."""

    __tablename__ = "saved_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reddit_id: Mapped[str] = mapped_column(String(32), nullable=False)
    subreddit: Mapped[str] = mapped_column(String(255), index=True)
    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text, default="")
    author: Mapped[str] = mapped_column(String(255), default="")
    score: Mapped[int] = mapped_column(Integer, default=0)
    url: Mapped[str] = mapped_column(Text)
    notion_page_id: Mapped[str] = mapped_column(String(64), default="")
    notion_page_url: Mapped[str] = mapped_column(Text, default="")
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "reddit_id", name="uq_saved_posts_user_reddit"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reddit_id": self.reddit_id,
            "subreddit": self.subreddit,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "score": self.score,
            "url": self.url,
            "notion_page_id": self.notion_page_id,
            "notion_page_url": self.notion_page_url,
            "saved_at": self.saved_at.isoformat() if self.saved_at else None,
        }

    def __repr__(self) -> str:
        return f"<SavedPost(id={self.id}, reddit_id='{self.reddit_id}', user_id={self.user_id})>"


class OAuthState(Base):
    """Single-use OAuth `state` nonce with an expiry."""

    __tablename__ = "oauth_states"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    state: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
