"""Event bus selection by configured backend."""

from __future__ import annotations

from contacts_service.core.config import EventBusConfig, NotifierConfig

from .memory_bus import MemoryEventBus
from .redis_streams import RedisStreamsBus


def create_event_bus(
    config: EventBusConfig,
    notifier: NotifierConfig | None = None,
) -> MemoryEventBus | RedisStreamsBus:
    """``memory`` keeps events in process; ``redis`` appends to Redis Streams.

    The notifier config supplies the stream field encoding for Redis.
    """
    if config.backend == "memory":
        return MemoryEventBus(max_events=config.max_stream_length)
    return RedisStreamsBus(
        redis_url=config.redis_url,
        max_stream_length=config.max_stream_length,
        serialization=notifier.serialization if notifier else "json",
    )
