"""
Record stores for MongoDB and an in-memory substitute.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from bson import ObjectId
from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection

PROJECTS_COLLECTION = "projects"
INQUIRIES_COLLECTION = "inquiries"

INQUIRY_STATUSES = ("new", "pending", "completed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordStore(Protocol):
    """Operations every resource needs from its backing store."""

    def list_records(self) -> list[dict]:
        ...

    def create(self, document: dict) -> dict:
        ...

    def update_field(self, record_id: str, field: str, value: Any) -> Optional[dict]:
        ...

    def delete(self, record_id: str) -> Optional[dict]:
        ...


@dataclass
class ProjectRecord:
    title: str
    description: str
    details: str
    image: str
    technologies: list[str]
    published: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def as_document(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "details": self.details,
            "image": self.image,
            "technologies": list(self.technologies),
            "published": self.published,
            "createdAt": self.created_at,
        }


@dataclass
class InquiryRecord:
    name: str
    email: str
    phone: str
    course: str
    message: Optional[str] = None
    status: str = "new"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def as_document(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "course": self.course,
            "message": self.message,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class InMemoryRecordStore:
    """
    Process-local list of records. Nothing survives a restart.

    Ids are the creation time in milliseconds, bumped by one on collision so
    they stay unique within the process.
    """

    def __init__(self, *, newest_first: bool = False, touch_field: str | None = None):
        self.records: list[dict] = []
        self.newest_first = newest_first
        self.touch_field = touch_field
        self._last_id = 0

    def _next_id(self) -> str:
        candidate = int(time.time() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self.records):
            if record["_id"] == record_id:
                return index
        return -1

    def list_records(self) -> list[dict]:
        if not self.newest_first:
            return [dict(record) for record in self.records]
        # Reverse first so records sharing a timestamp still come out newest-first.
        items = [dict(record) for record in reversed(self.records)]
        items.sort(key=lambda record: record["createdAt"], reverse=True)
        return items

    def create(self, document: dict) -> dict:
        record = {"_id": self._next_id(), **document}
        self.records.append(record)
        return dict(record)

    def update_field(self, record_id: str, field: str, value: Any) -> Optional[dict]:
        index = self._index_of(record_id)
        if index == -1:
            return None
        record = self.records[index]
        record[field] = value
        if self.touch_field:
            record[self.touch_field] = utcnow()
        return dict(record)

    def delete(self, record_id: str) -> Optional[dict]:
        index = self._index_of(record_id)
        if index == -1:
            return None
        return self.records.pop(index)

    def reset(self) -> None:
        """Clear all stored records (useful in tests)."""
        self.records.clear()


def _from_document(document: dict) -> dict:
    record = dict(document)
    record["_id"] = str(record["_id"])
    record.pop("__v", None)
    return record


def _object_id(record_id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(record_id):
        return None
    return ObjectId(record_id)


class MongoRecordStore:
    """
    MongoDB-backed implementation over a single collection.

    Errors from pymongo propagate to the caller; deciding what to do about an
    unreachable server is the storage adapter's job.
    """

    def __init__(
        self,
        collection: Collection,
        *,
        sort: list[tuple[str, int]] | None = None,
        touch_field: str | None = None,
    ):
        self.collection = collection
        self.sort = sort
        self.touch_field = touch_field

    def list_records(self) -> list[dict]:
        cursor = self.collection.find()
        if self.sort:
            cursor = cursor.sort(self.sort)
        return [_from_document(document) for document in cursor]

    def create(self, document: dict) -> dict:
        payload = dict(document)
        result = self.collection.insert_one(payload)
        payload["_id"] = result.inserted_id
        return _from_document(payload)

    def update_field(self, record_id: str, field: str, value: Any) -> Optional[dict]:
        object_id = _object_id(record_id)
        if object_id is None:
            return None
        changes = {field: value}
        if self.touch_field:
            changes[self.touch_field] = utcnow()
        document = self.collection.find_one_and_update(
            {"_id": object_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return _from_document(document) if document else None

    def delete(self, record_id: str) -> Optional[dict]:
        object_id = _object_id(record_id)
        if object_id is None:
            return None
        document = self.collection.find_one_and_delete({"_id": object_id})
        return _from_document(document) if document else None


def create_mongo_client(uri: str, timeout_ms: int = 5000) -> MongoClient:
    """
    Build a client with a fixed connect-time budget. pymongo connects lazily,
    so this never blocks; call `ping` to find out whether the server is there.
    """
    return MongoClient(
        uri,
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        socketTimeoutMS=timeout_ms,
        tz_aware=True,
    )


def ping(client: MongoClient) -> None:
    client.admin.command("ping")
