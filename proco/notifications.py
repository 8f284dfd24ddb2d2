"""
Server-sent notifications for inquiry activity.

Handlers publish from worker threads while each stream is served from the
event loop, so every subscription owns a queue on its loop and publishers
hand frames over with `call_soon_threadsafe`. A slow or vanished client can
only ever back up its own queue.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Optional

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    CONNECTED = "CONNECTED"
    NEW_INQUIRY = "NEW_INQUIRY"
    INQUIRY_STATUS_UPDATED = "INQUIRY_STATUS_UPDATED"
    # Older clients listen for this name; nothing publishes it any more.
    STATUS_UPDATED = "STATUS_UPDATED"
    INQUIRY_DELETED = "INQUIRY_DELETED"


@dataclass
class NotificationEvent:
    type: EventType
    data: Optional[Any] = None

    def as_dict(self) -> dict:
        payload = {"type": self.type.value}
        if self.data is not None:
            payload["data"] = jsonable_encoder(self.data)
        return payload


def format_sse(event: NotificationEvent) -> str:
    return f"data: {json.dumps(event.as_dict())}\n\n"


@dataclass
class Subscription:
    id: int
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    closed: bool = False

    def deliver(self, frame: str) -> None:
        if self.closed:
            return
        self.loop.call_soon_threadsafe(self.queue.put_nowait, frame)


class NotificationBroadcaster:
    """Registry of open notification streams."""

    def __init__(self):
        self._subscriptions: dict[int, Subscription] = {}
        self._lock = threading.Lock()
        self._last_id = 0

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def register(self) -> Subscription:
        """Must be called from the event loop that will serve the stream."""
        loop = asyncio.get_running_loop()
        with self._lock:
            subscription_id = max(time.time_ns(), self._last_id + 1)
            self._last_id = subscription_id
            subscription = Subscription(id=subscription_id, loop=loop)
            self._subscriptions[subscription_id] = subscription
            total = len(self._subscriptions)
        logger.info("New SSE client connected. Total subscribers: %d", total)
        return subscription

    def unregister(self, subscription_id: int) -> None:
        with self._lock:
            subscription = self._subscriptions.pop(subscription_id, None)
            total = len(self._subscriptions)
        if subscription is None:
            return
        subscription.closed = True
        logger.info("SSE client disconnected. Remaining subscribers: %d", total)

    def publish(self, event: NotificationEvent) -> int:
        """
        Push one event to every open stream and return how many accepted it.
        Delivery is best effort: a failing subscriber is logged and skipped.
        """
        frame = format_sse(event)
        with self._lock:
            subscriptions = list(self._subscriptions.values())
        logger.info(
            "Sending notification to %d subscribers: %s",
            len(subscriptions),
            event.type.value,
        )
        delivered = 0
        for subscription in subscriptions:
            try:
                subscription.deliver(frame)
            except Exception:
                logger.exception(
                    "Error sending notification to client %s", subscription.id
                )
                continue
            delivered += 1
        return delivered

    async def stream(self, subscription: Subscription) -> AsyncIterator[str]:
        try:
            yield format_sse(NotificationEvent(EventType.CONNECTED))
            while True:
                yield await subscription.queue.get()
        finally:
            self.unregister(subscription.id)
