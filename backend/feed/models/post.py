"""Post model: a user-authored feed item with an image."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from feed.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class Post(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Feed item authored by exactly one :class:`User`.

    Fields
    ------
    title : str
        Headline shown on the feed.
    content : str
        Body text shown on the detail view.
    image_url : str
        Reference to the image in the image store.
    creator_id : int
        Author; the only source of truth for ownership checks.
    """

    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(String(512), nullable=False)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    creator: Mapped[User] = relationship(back_populates="posts", lazy="joined")

    __table_args__ = (
        Index("ix_posts_creator_id", "creator_id"),
        Index("ix_posts_created_at", "created_at"),
    )

    @validates("title", "content", "image_url")
    def _require_text(self, key: str, value: str) -> str:
        # Stored as supplied; length rules are checked by PostService
        if not isinstance(value, str):
            raise ValueError(f"{key} must be a string.")
        return value
