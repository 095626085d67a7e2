"""User model definition for the social feed."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from feed.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .post import Post

DEFAULT_STATUS = "I am new!"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered author of posts.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed). Unique.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    name : str
        Display name shown next to the user's posts.
    status : str
        Free-text status line, ``"I am new!"`` until changed.
    post_ids : list[int]
        Owned-set of post ids. Bookkeeping only: ownership checks always use
        :attr:`Post.creator_id`.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_STATUS)
    post_ids: Mapped[list[int]] = mapped_column(
        MutableList.as_mutable(JSON), nullable=False, default=list
    )

    posts: Mapped[list[Post]] = relationship(back_populates="creator", lazy="select")

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Credentials --------------------
    @property
    def password(self) -> Any:
        """Plain passwords are never kept; reading raises :class:`AttributeError`."""
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Return whether ``raw`` matches the stored hash."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    # -------------------- Owned-set --------------------
    def add_post_ref(self, post_id: int) -> None:
        """Record ``post_id`` in the owned-set (no duplicates)."""
        if self.post_ids is None:
            self.post_ids = []
        if post_id not in self.post_ids:
            self.post_ids.append(post_id)

    def remove_post_ref(self, post_id: int) -> bool:
        """Drop ``post_id`` from the owned-set; return whether it was present."""
        if not self.post_ids or post_id not in self.post_ids:
            return False
        self.post_ids.remove(post_id)
        return True

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Shape only; IdentityService reports malformed emails to clients
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
