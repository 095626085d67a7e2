"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, RegisterSchema, TokenResponseSchema
from .common import MetaSchema, PageQuerySchema, build_meta
from .post import CreatorSchema, ImageSchema, PostInputSchema, PostSchema
from .user import StatusSchema, UserSchema

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "PageQuerySchema",
    "MetaSchema",
    "build_meta",
    "CreatorSchema",
    "ImageSchema",
    "PostInputSchema",
    "PostSchema",
    "StatusSchema",
    "UserSchema",
]
