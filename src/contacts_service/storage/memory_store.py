"""In-memory contact store for tests and the ``memory`` backend.

No external dependencies. Contacts are kept in an append-only list; id
assignment is serialized under an ``asyncio.Lock``. Streams take a
high-water mark when they open, so contacts inserted while a stream is in
flight are not yielded by it (snapshot-at-open).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing, asynccontextmanager

from contacts_service.core.models import Contact

logger = logging.getLogger(__name__)


class InMemoryContactStore:
    """Append-only contact store living in process memory."""

    def __init__(self, names: list[str] | None = None) -> None:
        self._contacts: list[Contact] = []
        self._lock = asyncio.Lock()
        self._next_id = 1

        # Observability
        self._open_streams = 0
        self._streams_opened = 0

        for name in names or []:
            self._append(name)

    def _append(self, name: str) -> Contact:
        contact = Contact(id=self._next_id, name=name)
        self._next_id += 1
        self._contacts.append(contact)
        return contact

    async def insert(self, name: str) -> Contact:
        async with self._lock:
            contact = self._append(name)
        logger.debug("Inserted contact id=%s", contact.id)
        return contact

    @asynccontextmanager
    async def stream_all(self) -> AsyncIterator[AsyncIterator[Contact]]:
        high_water = len(self._contacts)
        self._open_streams += 1
        self._streams_opened += 1
        try:
            async with aclosing(self._iter(high_water)) as records:
                yield records
        finally:
            self._open_streams -= 1

    async def _iter(self, high_water: int) -> AsyncIterator[Contact]:
        for index in range(high_water):
            yield self._contacts[index]

    async def count(self) -> int:
        return len(self._contacts)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def open_streams(self) -> int:
        """Streams currently holding the store open."""
        return self._open_streams

    @property
    def streams_opened(self) -> int:
        """Total streams opened over the store's lifetime."""
        return self._streams_opened
