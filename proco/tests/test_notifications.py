import asyncio
import json
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from proco.notifications import (
    EventType,
    NotificationBroadcaster,
    NotificationEvent,
    format_sse,
)


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


class FormatTests(unittest.TestCase):
    def test_connected_frame_has_no_data(self):
        frame = format_sse(NotificationEvent(EventType.CONNECTED))
        self.assertEqual(frame, 'data: {"type": "CONNECTED"}\n\n')

    def test_datetimes_are_serialised(self):
        created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        payload = _decode(
            format_sse(
                NotificationEvent(
                    EventType.NEW_INQUIRY, {"_id": "1", "createdAt": created}
                )
            )
        )
        self.assertEqual(payload["type"], "NEW_INQUIRY")
        self.assertEqual(payload["data"]["createdAt"], created.isoformat())


class NotificationBroadcasterTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.broadcaster = NotificationBroadcaster()

    async def test_stream_starts_with_connected_then_relays_events(self):
        subscription = self.broadcaster.register()
        stream = self.broadcaster.stream(subscription)

        first = _decode(await anext(stream))
        self.assertEqual(first, {"type": "CONNECTED"})

        delivered = self.broadcaster.publish(
            NotificationEvent(EventType.INQUIRY_DELETED, {"_id": "42"})
        )
        self.assertEqual(delivered, 1)
        second = _decode(await asyncio.wait_for(anext(stream), timeout=1))
        self.assertEqual(second, {"type": "INQUIRY_DELETED", "data": {"_id": "42"}})

        await stream.aclose()
        self.assertEqual(self.broadcaster.subscriber_count, 0)

    async def test_ids_are_unique(self):
        first = self.broadcaster.register()
        second = self.broadcaster.register()
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(self.broadcaster.subscriber_count, 2)

    async def test_every_subscriber_gets_exactly_one_copy(self):
        subscriptions = [self.broadcaster.register() for _ in range(3)]
        self.broadcaster.publish(NotificationEvent(EventType.NEW_INQUIRY, {"_id": "1"}))
        await asyncio.sleep(0.01)

        for subscription in subscriptions:
            self.assertEqual(subscription.queue.qsize(), 1)
            self.assertEqual(
                _decode(subscription.queue.get_nowait())["type"], "NEW_INQUIRY"
            )

    async def test_closed_subscription_receives_nothing(self):
        kept = self.broadcaster.register()
        closed = self.broadcaster.register()
        self.broadcaster.unregister(closed.id)

        delivered = self.broadcaster.publish(
            NotificationEvent(EventType.NEW_INQUIRY, {"_id": "1"})
        )
        await asyncio.sleep(0.01)

        self.assertEqual(delivered, 1)
        self.assertTrue(closed.closed)
        self.assertTrue(closed.queue.empty())
        self.assertEqual(kept.queue.qsize(), 1)

    async def test_unregister_is_idempotent(self):
        subscription = self.broadcaster.register()
        self.broadcaster.unregister(subscription.id)
        self.broadcaster.unregister(subscription.id)
        self.assertEqual(self.broadcaster.subscriber_count, 0)

    async def test_failing_subscriber_does_not_block_others(self):
        broken = self.broadcaster.register()
        healthy = self.broadcaster.register()
        broken.loop = MagicMock()
        broken.loop.call_soon_threadsafe.side_effect = RuntimeError("Event loop is closed")

        with self.assertLogs("proco.notifications", level="ERROR"):
            delivered = self.broadcaster.publish(
                NotificationEvent(EventType.INQUIRY_STATUS_UPDATED, {"_id": "1"})
            )
        await asyncio.sleep(0.01)

        self.assertEqual(delivered, 1)
        self.assertEqual(healthy.queue.qsize(), 1)

    async def test_publish_from_worker_thread(self):
        subscription = self.broadcaster.register()
        event = NotificationEvent(EventType.NEW_INQUIRY, {"_id": "7"})
        await asyncio.to_thread(self.broadcaster.publish, event)

        frame = await asyncio.wait_for(subscription.queue.get(), timeout=1)
        self.assertEqual(_decode(frame)["data"], {"_id": "7"})


if __name__ == "__main__":
    unittest.main()
