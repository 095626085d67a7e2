"""Notification channel lifecycle bound to the Flask application."""

from __future__ import annotations

from typing import cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app

from feed.services._shared.ports import InMemoryNotificationChannel, NotificationChannel

EXTENSION_KEY = "notification_channel"


def init_channel(transport: redis.Redis | None, *, channel: str = "posts") -> NotificationChannel:
    """Build the channel for ``transport``.

    Parameters
    ----------
    transport: redis.Redis | None
        Connected Redis client; ``None`` selects the in-process channel.
    channel: str
        Redis pub/sub channel name.

    Returns
    -------
    NotificationChannel
        Channel to inject into the post services.
    """
    if transport is None:
        return InMemoryNotificationChannel()

    from feed.infra.redis.redis_notification_channel import RedisNotificationChannel

    return RedisNotificationChannel(transport, channel=channel)


def init_app(app: Flask) -> None:
    """Create the channel once per application and register it."""
    transport = app.extensions.get("redis_client")
    app.extensions[EXTENSION_KEY] = init_channel(
        transport, channel=app.config.get("NOTIFICATION_CHANNEL", "posts")
    )


def get_channel(app: Flask | None = None) -> NotificationChannel:
    """Return the channel registered on ``app`` (defaults to the current app)."""
    target = app or current_app
    try:
        return cast(NotificationChannel, target.extensions[EXTENSION_KEY])
    except KeyError as exc:
        raise RuntimeError("Notification channel is not initialized. Call init_app() first.") from exc
