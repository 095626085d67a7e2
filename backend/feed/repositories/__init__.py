"""Repository package exposing persistence-layer access for the domain models."""

from __future__ import annotations

from feed.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from feed.repositories.post import FEED_ORDER, PostRepository
from feed.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "apply_sorting",
    "paginate_select",
    # Domain
    "FEED_ORDER",
    "PostRepository",
    "UserRepository",
]
