"""
Storage adapter that prefers MongoDB and degrades to an in-memory store.

Each resource gets its own adapter. While the adapter believes MongoDB is
reachable every call goes to the primary store; the first store error flips
it into demo mode, the failed call is replayed against the fallback, and all
later calls skip MongoDB until the process restarts.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from pymongo.errors import PyMongoError

from proco.db import InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)

MODE_MONGODB = "mongodb"
MODE_DEMO = "demo"

T = TypeVar("T")


class FallbackRecordStore:
    def __init__(
        self,
        name: str,
        fallback: InMemoryRecordStore,
        primary: Optional[RecordStore] = None,
        *,
        connected: bool = False,
    ):
        self.name = name
        self.fallback = fallback
        self.primary = primary
        self._connected = connected and primary is not None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def mode(self) -> str:
        return MODE_MONGODB if self.connected else MODE_DEMO

    def _degrade(self) -> None:
        with self._lock:
            if not self._connected:
                return
            self._connected = False
        logger.warning(
            "Store for %s is unreachable, running in demo mode with in-memory storage",
            self.name,
        )

    def _call(self, action: str, operation: Callable[[RecordStore], T]) -> T:
        if self.connected:
            try:
                return operation(self.primary)
            except PyMongoError:
                logger.exception(
                    "Error %s %s in MongoDB, falling back to in-memory storage",
                    action,
                    self.name,
                )
                self._degrade()
        with self._lock:
            return operation(self.fallback)

    def list(self) -> list[dict]:
        return self._call("fetching", lambda store: store.list_records())

    def create(self, document: dict) -> dict:
        return self._call("saving", lambda store: store.create(document))

    def update_field(self, record_id: str, field: str, value: Any) -> Optional[dict]:
        return self._call(
            "updating", lambda store: store.update_field(record_id, field, value)
        )

    def delete(self, record_id: str) -> Optional[dict]:
        return self._call("deleting", lambda store: store.delete(record_id))
