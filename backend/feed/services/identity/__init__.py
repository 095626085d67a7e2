from feed.services.identity.dto import (
    AuthTokenOut,
    StatusOut,
    StatusUpdateIn,
    UserAuthIn,
    UserPublicOut,
    UserRegisterIn,
)
from feed.services.identity.service import IdentityService

__all__ = [
    "AuthTokenOut",
    "IdentityService",
    "StatusOut",
    "StatusUpdateIn",
    "UserAuthIn",
    "UserPublicOut",
    "UserRegisterIn",
]
