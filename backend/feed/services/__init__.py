"""Service layer public API.

Callers import services and DTOs from :mod:`feed.services` without knowing
the internal package layout.
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from ._shared.dto import UNSET, PageMeta, PaginationIn
from ._shared.identity import ANONYMOUS, Anonymous, Authenticated, Identity
from .auth import resolve_identity
from .identity import (
    AuthTokenOut,
    IdentityService,
    StatusOut,
    StatusUpdateIn,
    UserAuthIn,
    UserPublicOut,
    UserRegisterIn,
)
from .images import ImageOut, ImageService
from .posts import (
    CreatorOut,
    PostCreateIn,
    PostListOut,
    PostOut,
    PostService,
    PostUpdateIn,
)

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    "PageMeta",
    "PaginationIn",
    "UNSET",
    # Identity
    "ANONYMOUS",
    "Anonymous",
    "Authenticated",
    "Identity",
    "resolve_identity",
    # Users
    "AuthTokenOut",
    "IdentityService",
    "StatusOut",
    "StatusUpdateIn",
    "UserAuthIn",
    "UserPublicOut",
    "UserRegisterIn",
    # Images
    "ImageOut",
    "ImageService",
    # Posts
    "CreatorOut",
    "PostCreateIn",
    "PostListOut",
    "PostOut",
    "PostService",
    "PostUpdateIn",
]
