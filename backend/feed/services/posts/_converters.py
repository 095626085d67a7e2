from __future__ import annotations

from typing import Any

from feed.models.post import Post

from .dto import CreatorOut, PostOut


def post_to_out(row: Post) -> PostOut:
    return PostOut(
        id=row.id,
        title=row.title,
        content=row.content,
        image_url=row.image_url,
        creator=CreatorOut(id=row.creator.id, name=row.creator.name),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def post_payload(out: PostOut) -> dict[str, Any]:
    """Serialize a :class:`PostOut` for notification events (JSON-safe)."""
    return {
        "id": out.id,
        "title": out.title,
        "content": out.content,
        "image_url": out.image_url,
        "creator": {"id": out.creator.id, "name": out.creator.name},
        "created_at": out.created_at.isoformat() if out.created_at else None,
        "updated_at": out.updated_at.isoformat() if out.updated_at else None,
    }
