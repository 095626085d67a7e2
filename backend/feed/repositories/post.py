"""Post repository: feed listing and lookups."""

from __future__ import annotations

from sqlalchemy.orm import joinedload

from feed.models.post import Post
from feed.repositories.base import BaseRepository, Page, Pagination

#: Newest first; id breaks ties between posts created in the same instant.
FEED_ORDER = ["-created_at", "-id"]


class PostRepository(BaseRepository[Post]):
    """Persistence-only repository for :class:`Post`."""

    model = Post

    def _sortable_fields(self):
        return {
            "id": Post.id,
            "created_at": Post.created_at,
            "title": Post.title,
        }

    def _filterable_fields(self):
        return {"creator_id": Post.creator_id, "image_url": Post.image_url}

    def _updatable_fields(self):
        return {"title", "content", "image_url"}

    def _default_eagerload(self, stmt):
        """Load the creator in the same query (1:1 from the post side)."""
        return stmt.options(joinedload(Post.creator))

    def feed_page(self, *, page: int, limit: int) -> Page[Post]:
        """Return one page of the feed in newest-first order."""
        return self.paginate(Pagination(page=page, limit=limit, sort=list(FEED_ORDER)))

    def is_image_referenced(self, image_url: str) -> bool:
        """Return whether any stored post still points at ``image_url``."""
        return self.exists(image_url=image_url)
