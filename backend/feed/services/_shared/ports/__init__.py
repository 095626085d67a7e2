"""
feed.services._shared.ports
===========================

Collection of *ports* (hexagonal interfaces) for the infrastructure the
service layer talks to.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for signing and verifying
    identity tokens.

- :mod:`image_store`:
    Defines :class:`~.ImageStore`, the storage of uploaded post images.

- :mod:`notification_channel`:
    Defines :class:`~.NotificationChannel`, the live-update fan-out of post
    lifecycle events.

Design Notes
------------
Concrete adapters (Redis, local disk, Flask-JWT-Extended) live under
``feed.infra``; in-memory implementations live beside each port for tests
and single-process deployments.
"""

from __future__ import annotations

from .image_store import ImageFile, ImageStore, InMemoryImageStore, UnsupportedImageError
from .notification_channel import (
    InMemoryNotificationChannel,
    NotificationChannel,
    PostAction,
    PostEvent,
)
from .token_provider import StubTokenProvider, TokenProvider, TokenVerificationError

__all__ = [
    "TokenProvider",
    "TokenVerificationError",
    "StubTokenProvider",
    "ImageFile",
    "ImageStore",
    "InMemoryImageStore",
    "UnsupportedImageError",
    "NotificationChannel",
    "InMemoryNotificationChannel",
    "PostAction",
    "PostEvent",
]
