import unittest
from unittest.mock import MagicMock

from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from proco.db import InMemoryRecordStore, InquiryRecord, MongoRecordStore
from proco.storage import MODE_DEMO, MODE_MONGODB, FallbackRecordStore


def _inquiry(name="A") -> dict:
    return InquiryRecord(
        name=name, email="a@x.com", phone="123", course="MERN"
    ).as_document()


class FallbackRecordStoreTests(unittest.TestCase):
    def setUp(self):
        self.primary = MagicMock()
        self.fallback = InMemoryRecordStore(newest_first=True, touch_field="updatedAt")
        self.store = FallbackRecordStore(
            "inquiries", self.fallback, self.primary, connected=True
        )

    def test_connected_store_uses_primary(self):
        self.primary.create.return_value = {"_id": "abc", "name": "A"}
        created = self.store.create(_inquiry())
        self.assertEqual(created["_id"], "abc")
        self.assertEqual(self.fallback.records, [])
        self.assertTrue(self.store.connected)
        self.assertEqual(self.store.mode, MODE_MONGODB)

    def test_primary_failure_degrades_and_writes_to_fallback(self):
        self.primary.create.side_effect = ServerSelectionTimeoutError("down")
        created = self.store.create(_inquiry())

        self.assertFalse(self.store.connected)
        self.assertEqual(self.store.mode, MODE_DEMO)
        self.assertEqual(len(self.fallback.records), 1)
        self.assertEqual(created["_id"], self.fallback.records[0]["_id"])
        self.assertEqual(created["status"], "new")

    def test_degraded_store_never_calls_primary_again(self):
        self.primary.list_records.side_effect = AutoReconnect("reset")
        self.assertEqual(self.store.list(), [])
        self.primary.list_records.side_effect = None

        self.store.create(_inquiry())
        self.store.list()
        self.store.update_field("missing", "status", "pending")
        self.store.delete("missing")

        self.assertEqual(self.primary.list_records.call_count, 1)
        self.primary.create.assert_not_called()
        self.primary.update_field.assert_not_called()
        self.primary.delete.assert_not_called()
        self.assertFalse(self.store.connected)

    def test_not_found_in_primary_does_not_degrade(self):
        self.primary.delete.return_value = None
        self.assertIsNone(self.store.delete("65f0c0ffee0000000000abcd"))
        self.assertTrue(self.store.connected)

    def test_update_after_degrading_misses_records_only_in_primary(self):
        self.primary.update_field.side_effect = ServerSelectionTimeoutError("down")
        self.assertIsNone(
            self.store.update_field("65f0c0ffee0000000000abcd", "status", "pending")
        )
        self.assertFalse(self.store.connected)

    def test_non_store_errors_propagate(self):
        self.primary.create.side_effect = KeyError("boom")
        with self.assertRaises(KeyError):
            self.store.create(_inquiry())
        self.assertTrue(self.store.connected)

    def test_store_without_primary_starts_in_demo_mode(self):
        store = FallbackRecordStore("projects", InMemoryRecordStore(), connected=True)
        self.assertFalse(store.connected)
        self.assertEqual(store.mode, MODE_DEMO)

    def test_adapters_keep_independent_flags(self):
        projects_primary = MagicMock()
        projects = FallbackRecordStore(
            "projects", InMemoryRecordStore(), projects_primary, connected=True
        )
        self.primary.list_records.side_effect = ServerSelectionTimeoutError("down")
        self.store.list()

        self.assertFalse(self.store.connected)
        self.assertTrue(projects.connected)

    def test_degrades_with_real_mongo_store_over_failing_collection(self):
        collection = MagicMock()
        collection.insert_one.side_effect = ServerSelectionTimeoutError("down")
        store = FallbackRecordStore(
            "inquiries",
            InMemoryRecordStore(newest_first=True, touch_field="updatedAt"),
            MongoRecordStore(collection, touch_field="updatedAt"),
            connected=True,
        )
        created = store.create(_inquiry("B"))
        self.assertEqual(created["name"], "B")
        self.assertEqual(store.mode, MODE_DEMO)
        self.assertEqual([r["name"] for r in store.list()], ["B"])


if __name__ == "__main__":
    unittest.main()
