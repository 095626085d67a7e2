from feed.models.post import Post
from feed.models.user import User

__all__ = [
    "Post",
    "User",
]
