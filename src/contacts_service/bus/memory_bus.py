"""In-process event bus for the ``memory`` backend and for tests.

Published events are kept in arrival order, optionally capped at
``max_events`` like the Redis stream this bus stands in for, so tests and
local runs can see exactly what the notifier delivered.
"""

from __future__ import annotations

import logging
from collections import deque

from contacts_service.core.events import BaseEvent

logger = logging.getLogger(__name__)


class MemoryEventBus:
    def __init__(self, max_events: int | None = None) -> None:
        self._log: deque[tuple[str, BaseEvent]] = deque(maxlen=max_events)
        self._running = False

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def publish(self, topic: str, event: BaseEvent) -> None:
        self._log.append((topic, event))
        logger.debug("Recorded %s on %s", type(event).__name__, topic)

    def get_history(self, topic: str | None = None) -> list[BaseEvent]:
        """Events still retained, oldest first, optionally for one topic."""
        return [event for t, event in self._log if topic is None or t == topic]

    def clear_history(self) -> None:
        self._log.clear()
