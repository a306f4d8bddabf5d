"""Contact service: create-and-publish and streaming filtered listing.

The service is composed explicitly from a store, a notifier, a pattern
compiler and a clock (see :func:`contacts_service.app.build_container`).

``create_contact``
    Insert, then hand a :class:`ContactCreatedEvent` to the notifier without
    waiting for delivery. Storage failures propagate; notification failures
    never do.

``list_contacts_excluding``
    Compile the pattern first. An invalid pattern is returned as a
    :class:`PatternError` value and no stream is opened. Otherwise stream the
    whole store through the exclusion filter and collect the survivors
    while the cursor is still open; the cursor is released on every exit
    path, including timeout and cancellation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import aclosing

from contacts_service.core.clock import IClock, WallClock
from contacts_service.core.errors import ListTimeoutError, PatternError, StorageError
from contacts_service.core.events import ContactCreatedEvent
from contacts_service.core.interfaces import IContactStore, IEventNotifier
from contacts_service.core.models import Contact
from contacts_service.filtering import (
    NameMatcher,
    PatternCompiler,
    compile_pattern,
    filter_excluding,
)
from contacts_service.observability import metrics
from contacts_service.observability.logger import get_trace_id

logger = logging.getLogger(__name__)


class ContactService:
    """Orchestrates the contact store, the name filter and the notifier."""

    def __init__(
        self,
        store: IContactStore,
        notifier: IEventNotifier,
        *,
        pattern_compiler: PatternCompiler = compile_pattern,
        clock: IClock | None = None,
        list_timeout: float | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._compile = pattern_compiler
        self._clock = clock or WallClock()
        self._list_timeout = list_timeout

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_contact(self, name: str) -> Contact:
        """Persist a contact and schedule its creation event.

        Raises:
            StorageError: The insert failed; no event is published.
        """
        contact = await self._store.insert(name)
        metrics.record_contact_created()
        logger.info("Contact created id=%s", contact.id)

        event = ContactCreatedEvent.from_contact(
            contact, created_at=self._clock.now(), trace_id=get_trace_id()
        )
        try:
            await self._notifier.publish(event)
        except Exception:
            # The write is committed; a notifier fault must not undo it.
            logger.exception("Notifier rejected event for contact %s", contact.id)

        return contact

    async def count_contacts(self) -> int:
        """Number of stored contacts."""
        return await self._store.count()

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    async def list_contacts_excluding(self, pattern: str) -> list[Contact] | PatternError:
        """Return every contact whose name does not match *pattern*, id order.

        Returns:
            The surviving contacts, or a :class:`PatternError` if *pattern*
            does not compile.

        Raises:
            StorageError: The stream could not be opened or read.
            ListTimeoutError: The scan exceeded ``list_timeout``.
        """
        compiled = self._compile(pattern)
        if isinstance(compiled, PatternError):
            logger.warning("Rejected name filter %r: %s", pattern, compiled.detail)
            metrics.record_list("invalid_pattern")
            return compiled

        started = time.monotonic()
        try:
            if self._list_timeout is None:
                contacts, scanned = await self._collect(compiled)
            else:
                contacts, scanned = await asyncio.wait_for(
                    self._collect(compiled), timeout=self._list_timeout
                )
        except asyncio.TimeoutError as exc:
            metrics.record_list("timeout")
            logger.error(
                "Listing with filter %r exceeded %.1fs", pattern, self._list_timeout
            )
            raise ListTimeoutError(
                f"Listing did not complete within {self._list_timeout}s"
            ) from exc
        except StorageError:
            metrics.record_list("storage_error")
            raise

        elapsed = time.monotonic() - started
        metrics.LIST_LATENCY.observe(elapsed)
        metrics.record_list("ok", scanned=scanned, excluded=scanned - len(contacts))
        logger.info(
            "Filter %r kept %d of %d contacts in %.3fs",
            pattern,
            len(contacts),
            scanned,
            elapsed,
        )
        return contacts

    async def _collect(self, matcher: NameMatcher) -> tuple[list[Contact], int]:
        scanned = 0

        async def counted(records: AsyncIterator[Contact]) -> AsyncIterator[Contact]:
            nonlocal scanned
            async for record in records:
                scanned += 1
                yield record

        async with self._store.stream_all() as records:
            async with aclosing(counted(records)) as read:
                async with aclosing(filter_excluding(matcher, read)) as kept:
                    contacts = [contact async for contact in kept]

        return contacts, scanned
