"""Time source for event timestamps.

``WallClock`` is used in production. ``SimClock`` stays put until a test
moves it, so ``createdAt`` values can be asserted exactly.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class IClock(Protocol):
    def now(self) -> datetime:
        """Timezone-aware UTC time."""
        ...


class WallClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SimClock:
    """Manually driven clock, starting at 2024-01-01T00:00:00Z by default."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, when: datetime) -> None:
        if when < self._current:
            raise ValueError(f"SimClock cannot move back from {self._current} to {when}")
        self._current = when

    def advance_ms(self, ms: int) -> None:
        self.set_time(self._current + timedelta(milliseconds=ms))
