"""Redis Streams event bus (publish side).

Each topic is a Redis Stream; every publish is one ``XADD``. Streams are
capped at ``max_stream_length`` entries (approximate trimming). No
partition key is used, so no ordering is promised across publishers.

Serialization modes:
- ``json``: two fields, ``_type`` (event class name) and ``_data``
  (the camelCase JSON payload).
- ``flat``: one JSON-encoded stream field per payload key plus ``_type``.
"""

from __future__ import annotations

import json
import logging

import redis.asyncio as aioredis

from contacts_service.core.events import BaseEvent

logger = logging.getLogger(__name__)

SERIALIZATION_MODES = ("json", "flat")


def serialize_event(event: BaseEvent, mode: str = "json") -> dict[str, str]:
    """Encode an event as Redis Stream fields."""
    if mode not in SERIALIZATION_MODES:
        raise ValueError(f"Unknown serialization mode: {mode!r}")

    event_type = type(event).__name__
    if mode == "json":
        return {
            "_type": event_type,
            "_data": event.model_dump_json(by_alias=True),
        }

    payload = event.model_dump(mode="json", by_alias=True)
    fields = {key: json.dumps(value) for key, value in payload.items()}
    fields["_type"] = event_type
    return fields


class RedisStreamsBus:
    """Publishes contact events as Redis Stream entries, one stream per topic."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        max_stream_length: int = 10_000,
        serialization: str = "json",
        client: aioredis.Redis | None = None,
    ) -> None:
        if serialization not in SERIALIZATION_MODES:
            raise ValueError(f"Unknown serialization mode: {serialization!r}")
        self._redis_url = redis_url
        self._redis: aioredis.Redis | None = client
        self._owns_client = client is None
        self._max_len = max_stream_length
        self._serialization = serialization
        self._messages_published = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Create the Redis client. Connections are opened lazily."""
        if self._redis is None:
            self._redis = aioredis.from_url(
                self._redis_url, decode_responses=True
            )
        logger.info("RedisStreamsBus ready (%s)", self._redis_url.split("@")[-1])

    async def stop(self) -> None:
        """Close the Redis connection if this bus created it."""
        if self._redis is not None and self._owns_client:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    async def publish(self, topic: str, event: BaseEvent) -> None:
        """Append an event to the topic's stream.

        Raises:
            RuntimeError: The bus has not been started.
            redis.exceptions.RedisError: The server could not be reached
                or rejected the write.
        """
        if self._redis is None:
            raise RuntimeError("RedisStreamsBus not started")

        await self._redis.xadd(
            topic,
            serialize_event(event, self._serialization),
            maxlen=self._max_len,
            approximate=True,
        )
        self._messages_published += 1

    @property
    def messages_published(self) -> int:
        return self._messages_published
