"""
Dependency wiring for the FastAPI app.

All mutable state (storage adapters, their fallback collections and the
notification registry) lives on one `AppContext` built at startup and kept
on `app.state`, rather than in module globals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from proco.config import Settings
from proco.db import (
    INQUIRIES_COLLECTION,
    PROJECTS_COLLECTION,
    InMemoryRecordStore,
    MongoRecordStore,
    create_mongo_client,
    ping,
)
from proco.notifications import NotificationBroadcaster
from proco.storage import MODE_DEMO, MODE_MONGODB, FallbackRecordStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    projects: FallbackRecordStore
    inquiries: FallbackRecordStore
    broadcaster: NotificationBroadcaster = field(default_factory=NotificationBroadcaster)
    mongo_client: Optional[MongoClient] = None

    @property
    def mongodb_connected(self) -> bool:
        return self.projects.connected and self.inquiries.connected

    @property
    def mode(self) -> str:
        return MODE_MONGODB if self.mongodb_connected else MODE_DEMO

    def close(self) -> None:
        if self.mongo_client is not None:
            self.mongo_client.close()


def in_memory_context() -> AppContext:
    """Context with no MongoDB at all; used for demo runs and tests."""
    return AppContext(
        projects=FallbackRecordStore(PROJECTS_COLLECTION, InMemoryRecordStore()),
        inquiries=FallbackRecordStore(
            INQUIRIES_COLLECTION,
            InMemoryRecordStore(newest_first=True, touch_field="updatedAt"),
        ),
    )


def build_context(settings: Settings) -> AppContext:
    """
    Connect to MongoDB once and build the adapters. An unreachable server is
    not fatal: the adapters simply start out in demo mode and stay there.
    """
    if settings.use_in_memory_backends:
        logger.info("In-memory backends requested, running in demo mode")
        return in_memory_context()

    client: Optional[MongoClient] = None
    connected = False
    try:
        client = create_mongo_client(settings.mongodb_uri, settings.mongodb_timeout_ms)
        ping(client)
    except PyMongoError:
        logger.exception("MongoDB connection error")
        logger.info("Running in demo mode with in-memory storage")
    else:
        logger.info("MongoDB connected successfully")
        connected = True

    if client is None:
        # The URI itself was unusable, so there is no primary to fall back from.
        return in_memory_context()

    database = client.get_default_database(default=settings.mongodb_database)
    projects = FallbackRecordStore(
        PROJECTS_COLLECTION,
        InMemoryRecordStore(),
        MongoRecordStore(database[PROJECTS_COLLECTION]),
        connected=connected,
    )
    inquiries = FallbackRecordStore(
        INQUIRIES_COLLECTION,
        InMemoryRecordStore(newest_first=True, touch_field="updatedAt"),
        MongoRecordStore(
            database[INQUIRIES_COLLECTION],
            sort=[("createdAt", DESCENDING), ("_id", DESCENDING)],
            touch_field="updatedAt",
        ),
        connected=connected,
    )
    return AppContext(projects=projects, inquiries=inquiries, mongo_client=client)


def get_context(request: Request) -> AppContext:
    context = request.app.state.context
    if context is None:
        raise RuntimeError(
            "Application context is not initialised; pass one to create_app() "
            "or run the app with its lifespan enabled"
        )
    return context


def get_project_store(request: Request) -> FallbackRecordStore:
    return get_context(request).projects


def get_inquiry_store(request: Request) -> FallbackRecordStore:
    return get_context(request).inquiries


def get_broadcaster(request: Request) -> NotificationBroadcaster:
    return get_context(request).broadcaster
