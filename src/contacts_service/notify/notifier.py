"""Best-effort delivery of :class:`ContactCreatedEvent` to the event bus.

``publish`` only enqueues: it waits at most ``enqueue_timeout`` seconds for
room on a bounded queue and drops the event (logged and counted) if none
frees up. A single worker task drains the queue and sends each event to
the configured topic, making at most ``max_attempts`` attempts with a
linear backoff. Delivery failures are logged, counted and handed to the
optional ``on_failure`` callback; they never reach the code that created
the contact.

Usage::

    notifier = ContactEventNotifier(bus, settings.notifier)
    await notifier.start()
    ...
    await notifier.publish(ContactCreatedEvent.from_contact(contact))
    ...
    await notifier.stop()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass

from contacts_service.core.config import NotifierConfig
from contacts_service.core.errors import NotifyError
from contacts_service.core.events import ContactCreatedEvent
from contacts_service.core.interfaces import IEventPublisher
from contacts_service.observability import metrics

logger = logging.getLogger(__name__)


@dataclass
class NotifierStats:
    published: int = 0
    failed: int = 0
    dropped: int = 0
    attempt_errors: int = 0


class ContactEventNotifier:
    """Queue-backed, fire-and-forget publisher for contact events."""

    def __init__(
        self,
        bus: IEventPublisher,
        config: NotifierConfig | None = None,
        on_failure: Callable[[ContactCreatedEvent, NotifyError], None] | None = None,
    ) -> None:
        self._bus = bus
        self._config = config or NotifierConfig()
        self._on_failure = on_failure
        self._queue: asyncio.Queue[ContactCreatedEvent] = asyncio.Queue(
            maxsize=self._config.queue_size
        )
        self._worker: asyncio.Task | None = None
        self._stats = NotifierStats()

    @property
    def topic(self) -> str:
        return self._config.topic

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Spawn the delivery worker. Idempotent."""
        if self._worker is not None and not self._worker.done():
            return
        self._worker = asyncio.create_task(
            self._run(), name=f"contact-notifier-{self.topic}"
        )
        logger.info("Contact event notifier started (topic=%s)", self.topic)

    async def stop(self, drain_timeout: float | None = None) -> None:
        """Give queued events up to *drain_timeout* seconds, then stop."""
        if self._worker is None:
            return

        timeout = self._config.drain_timeout if drain_timeout is None else drain_timeout
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Notifier stopping with %d undelivered event(s)", self._queue.qsize()
            )

        self._worker.cancel()
        await asyncio.gather(self._worker, return_exceptions=True)
        self._worker = None
        logger.info("Contact event notifier stopped")

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    async def publish(self, event: ContactCreatedEvent) -> None:
        """Hand *event* to the delivery worker without waiting for delivery."""
        try:
            await asyncio.wait_for(
                self._queue.put(event), timeout=self._config.enqueue_timeout
            )
        except asyncio.TimeoutError:
            self._stats.dropped += 1
            metrics.record_event_dropped(self.topic)
            logger.warning(
                "Notifier queue full; dropped event for contact %s", event.contact_id
            )
            return
        metrics.update_queue_depth(self._queue.qsize())

    # ------------------------------------------------------------------
    # Delivery worker
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()
                metrics.update_queue_depth(self._queue.qsize())

    async def _deliver(self, event: ContactCreatedEvent) -> None:
        max_attempts = self._config.max_attempts
        last_exc: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                await asyncio.wait_for(
                    self._bus.publish(self.topic, event),
                    timeout=self._config.send_timeout,
                )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                last_exc = exc
                self._stats.attempt_errors += 1
                metrics.record_event_attempt_error(self.topic)
                logger.warning(
                    "Publish attempt %d/%d for contact %s on %s failed: %r",
                    attempt,
                    max_attempts,
                    event.contact_id,
                    self.topic,
                    exc,
                )
                if attempt < max_attempts:
                    await asyncio.sleep(self._config.retry_backoff * attempt)
                continue

            self._stats.published += 1
            metrics.record_event_published(self.topic)
            logger.debug("Published event for contact %s to %s", event.contact_id, self.topic)
            return

        error = NotifyError(self.topic, max_attempts, repr(last_exc))
        self._stats.failed += 1
        metrics.record_event_failed(self.topic)
        logger.error("Giving up on event for contact %s: %s", event.contact_id, error)

        if self._on_failure is not None:
            try:
                self._on_failure(event, error)
            except Exception:
                logger.warning("on_failure callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> NotifierStats:
        return NotifierStats(**asdict(self._stats))

    def snapshot(self) -> dict[str, int]:
        """Counters plus current queue depth, for health endpoints."""
        return {"queued": self._queue.qsize(), **asdict(self._stats)}
