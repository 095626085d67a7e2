import json
import logging
from typing import cast

import redis  # type: ignore[import-untyped]

from feed.services._shared.ports import NotificationChannel, PostEvent

logger = logging.getLogger(__name__)


class RedisNotificationChannel(NotificationChannel):
    """
    Broadcast post lifecycle events over Redis pub/sub.

    Every connected client process subscribes to ``channel`` and relays the
    JSON payload to its sockets.
    """

    def __init__(self, r: redis.Redis, *, channel: str = "posts"):
        self.r = r
        self.channel = channel

    def publish(self, event: PostEvent) -> None:
        receivers = cast(int, self.r.publish(self.channel, json.dumps(event, default=str)))
        logger.debug(
            "Post event published",
            extra={"action": event.get("action"), "receivers": receivers},
        )
