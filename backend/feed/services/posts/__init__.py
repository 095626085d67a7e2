from feed.services.posts.dto import (
    CreatorOut,
    PostCreateIn,
    PostListOut,
    PostOut,
    PostUpdateIn,
)
from feed.services.posts.service import PostService

__all__ = [
    "CreatorOut",
    "PostCreateIn",
    "PostListOut",
    "PostOut",
    "PostService",
    "PostUpdateIn",
]
