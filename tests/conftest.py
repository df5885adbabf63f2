"""Shared fixtures for Prompt Desk Bot tests."""

import asyncio
import itertools
import os
from datetime import datetime, timedelta, timezone

import pytest

# Never talk to Telegram from tests
os.environ.setdefault("TELEGRAM_API_TOKEN", "")
os.environ.setdefault("WEBHOOK_SECRET", "")

from bot.admins import AdminRegistry
from bot.errors import StoreError
from bot.models import IncomingMessage
from bot.router import create_router
from bot.store import InMemoryDocumentStore

OPERATOR_ID = "100"


class FlakyStore(InMemoryDocumentStore):
    """In-memory store that raises StoreError on chosen (operation, collection) calls."""

    def __init__(self):
        super().__init__()
        self.failures = {}

    def fail(self, operation, collection, times=1):
        self.failures[(operation, collection)] = times

    def _check(self, operation, collection):
        remaining = self.failures.get((operation, collection), 0)
        if remaining:
            self.failures[(operation, collection)] = remaining - 1
            raise StoreError(operation, collection)

    async def insert(self, collection, record):
        self._check("insert", collection)
        return await super().insert(collection, record)

    async def delete_one(self, collection, filter=None):
        self._check("delete_one", collection)
        return await super().delete_one(collection, filter)


class FakeClock:
    """Deterministic clock that advances a fixed step on every call."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        value = self.now
        self.now = self.now + self.step
        return value


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def flaky_store():
    return FlakyStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    return AdminRegistry([OPERATOR_ID])


@pytest.fixture
def router(store, registry, clock):
    return create_router(store, registry, clock=clock)


@pytest.fixture
def send(router):
    """Route one text message and return the resulting turn."""
    message_ids = itertools.count(1)

    def _send(conversation_id, text, author_id=None, name="tester"):
        message = IncomingMessage(
            conversation_id=conversation_id,
            author_id=author_id or conversation_id,
            author_display_name=name,
            source_message_id=next(message_ids),
            text=text,
        )
        return asyncio.run(router.route(message))

    return _send
