"""Shared fixtures for the contacts-service test suite."""

from __future__ import annotations

import asyncio

import pytest

from contacts_service.bus.memory_bus import MemoryEventBus
from contacts_service.core.clock import SimClock
from contacts_service.core.config import NotifierConfig
from contacts_service.core.errors import StorageError
from contacts_service.core.events import ContactCreatedEvent
from contacts_service.core.models import Contact
from contacts_service.notify import ContactEventNotifier
from contacts_service.service import ContactService
from contacts_service.storage import InMemoryContactStore
from contacts_service.storage.sql import create_all, create_engine


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_store() -> InMemoryContactStore:
    return InMemoryContactStore()


@pytest.fixture
def seeded_store() -> InMemoryContactStore:
    """Jane (1), Jack (2), Bob (3)."""
    return InMemoryContactStore(["Jane", "Jack", "Bob"])


class FailingInsertStore(InMemoryContactStore):
    """Store whose writes always fail."""

    async def insert(self, name: str) -> Contact:
        raise StorageError("database unreachable")


class SlowStreamStore(InMemoryContactStore):
    """Store that sleeps before yielding each record."""

    def __init__(self, names: list[str] | None = None, delay: float = 0.5) -> None:
        super().__init__(names)
        self.delay = delay

    async def _iter(self, high_water: int):
        for index in range(high_water):
            await asyncio.sleep(self.delay)
            yield self._contacts[index]


class BrokenStreamStore(InMemoryContactStore):
    """Store whose stream fails after yielding ``fail_after`` records."""

    def __init__(self, names: list[str] | None = None, fail_after: int = 1) -> None:
        super().__init__(names)
        self.fail_after = fail_after

    async def _iter(self, high_water: int):
        for index in range(high_water):
            if index == self.fail_after:
                raise StorageError("connection reset while fetching")
            yield self._contacts[index]


class TrackedStreamStore(InMemoryContactStore):
    """Store that records whether its record iterator was closed."""

    def __init__(self, names: list[str] | None = None) -> None:
        super().__init__(names)
        self.iterators_closed = 0

    async def _iter(self, high_water: int):
        try:
            for index in range(high_water):
                yield self._contacts[index]
        finally:
            self.iterators_closed += 1


@pytest.fixture
def failing_store() -> FailingInsertStore:
    return FailingInsertStore(["Jane"])


@pytest.fixture
def slow_store_factory():
    """Build a SlowStreamStore: ``slow_store_factory(names, delay=...)``."""
    return SlowStreamStore


@pytest.fixture
def broken_store() -> BrokenStreamStore:
    return BrokenStreamStore(["Ann", "Ben", "Cid"], fail_after=1)


@pytest.fixture
def tracked_store() -> TrackedStreamStore:
    return TrackedStreamStore(["Ann", "Ben", "Cid"])


@pytest.fixture
async def sqlite_engine(tmp_path):
    """File-backed SQLite engine with the contacts table created."""
    engine = create_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'contacts.db'}", use_null_pool=True
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


# ---------------------------------------------------------------------------
# Bus / notifier
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_bus() -> MemoryEventBus:
    return MemoryEventBus()


@pytest.fixture
def notifier_config() -> NotifierConfig:
    """Small timeouts and no backoff so delivery tests run fast."""
    return NotifierConfig(
        topic="contact-events",
        queue_size=100,
        enqueue_timeout=0.01,
        send_timeout=0.2,
        max_attempts=3,
        retry_backoff=0.0,
        drain_timeout=2.0,
    )


@pytest.fixture
async def notifier(memory_bus, notifier_config):
    n = ContactEventNotifier(memory_bus, notifier_config)
    await n.start()
    yield n
    await n.stop()


class RecordingNotifier:
    """Notifier stand-in that records what it was handed."""

    def __init__(self, fail: bool = False) -> None:
        self.events: list[ContactCreatedEvent] = []
        self.fail = fail

    async def publish(self, event: ContactCreatedEvent) -> None:
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.events.append(event)


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def unreachable_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@pytest.fixture
def service(seeded_store, notifier, sim_clock) -> ContactService:
    return ContactService(seeded_store, notifier, clock=sim_clock)
