"""Protocol interfaces for the contacts service.

Module boundaries are defined here as Protocol classes so implementations
(SQL / in-memory store, Redis / in-memory bus) can be swapped without
changing callers.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable

from .events import BaseEvent, ContactCreatedEvent
from .models import Contact


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@runtime_checkable
class IContactStore(Protocol):
    """Persistence for contacts: point inserts and a streaming full read."""

    async def insert(self, name: str) -> Contact:
        """Persist a new contact and return it with its assigned id.

        Raises:
            StorageError: The medium is unreachable or rejected the write.
        """
        ...

    def stream_all(self) -> AbstractAsyncContextManager[AsyncIterator[Contact]]:
        """Open a single-pass, id-ordered stream over every contact.

        Use as ``async with store.stream_all() as records:``; the
        underlying cursor is released when the block exits, however it
        exits.

        Raises:
            StorageError: The stream could not be opened or a fetch failed.
        """
        ...

    async def count(self) -> int: ...


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventPublisher(Protocol):
    """Publish side of an event bus."""

    async def publish(self, topic: str, event: BaseEvent) -> None: ...

    async def start(self) -> None: ...
    async def stop(self) -> None: ...


@runtime_checkable
class IEventNotifier(Protocol):
    """Best-effort, non-blocking hand-off of creation events."""

    async def publish(self, event: ContactCreatedEvent) -> None: ...
