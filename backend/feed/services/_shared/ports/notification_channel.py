from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal, Protocol, TypedDict

PostAction = Literal["create", "update", "delete"]


class PostEvent(TypedDict, total=False):
    """
    Live-update payload broadcast to connected clients.

    ``post`` is present for create/update, ``post_id`` for delete.
    """

    action: PostAction
    post: dict[str, Any]
    post_id: int


class NotificationChannel(Protocol):
    """Publish/subscribe fan-out of post lifecycle events."""

    def publish(self, event: PostEvent) -> None: ...


class InMemoryNotificationChannel(NotificationChannel):
    """
    In-process fan-out.

    Keeps a history of published events and invokes subscribed callbacks
    synchronously, in subscription order.
    """

    def __init__(self) -> None:
        self.events: list[PostEvent] = []
        self._subscribers: list[Callable[[PostEvent], None]] = []

    def subscribe(self, callback: Callable[[PostEvent], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, event: PostEvent) -> None:
        self.events.append(event)
        for callback in list(self._subscribers):
            callback(event)
