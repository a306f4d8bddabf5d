"""Event bus backends: in-memory and Redis Streams."""

from .bus import create_event_bus
from .memory_bus import MemoryEventBus
from .redis_streams import RedisStreamsBus

__all__ = ["MemoryEventBus", "RedisStreamsBus", "create_event_bus"]
