from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from feed.services._shared.dto import UNSET, PageMeta, _Unset

# ------------------------------ Input DTOs ------------------------------- #


@dataclass(frozen=True, slots=True)
class PostCreateIn:
    """
    Input DTO for creating a post.

    :param title: Headline, at least 5 characters after trimming.
    :param content: Body, at least 5 characters after trimming.
    :param image_url: Reference returned by the image store. May be empty
        when an uploaded file is handed to the service alongside the DTO.
    """

    title: str
    content: str
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class PostUpdateIn:
    """
    Input DTO for updating a post.

    ``image_url`` left as :data:`UNSET` keeps the stored reference; an explicit
    value must be non-blank.
    """

    post_id: int
    title: str
    content: str
    image_url: str | _Unset = field(default=UNSET)


# ------------------------------ Output DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class CreatorOut:
    """Public projection of a post's author (id and display name only)."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class PostOut:
    id: int
    title: str
    content: str
    image_url: str
    creator: CreatorOut
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class PostListOut:
    """
    One feed page.

    :param posts: Posts on the page, newest first.
    :param total_count: Number of posts across all pages.
    :param meta: Pagination metadata for the page.
    """

    posts: list[PostOut]
    total_count: int
    meta: PageMeta
