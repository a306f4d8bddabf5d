"""Explicit composition of the contacts service.

Everything the service needs is built here from :class:`Settings` and
passed in through constructors; nothing is looked up from a global
registry. Tests pass their own store, bus or clock to swap pieces out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from contacts_service.bus import MemoryEventBus, RedisStreamsBus, create_event_bus
from contacts_service.core.clock import IClock
from contacts_service.core.config import Settings
from contacts_service.core.interfaces import IContactStore, IEventPublisher
from contacts_service.notify import ContactEventNotifier
from contacts_service.service import ContactService
from contacts_service.storage import InMemoryContactStore
from contacts_service.storage.sql import SqlContactStore, create_all, engine_from_config

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """The wired object graph plus its start/stop lifecycle."""

    settings: Settings
    store: IContactStore
    bus: IEventPublisher
    notifier: ContactEventNotifier
    service: ContactService
    engine: AsyncEngine | None = None

    async def start(self) -> None:
        if self.engine is not None and self.settings.database.create_tables:
            await create_all(self.engine)
        await self.bus.start()
        await self.notifier.start()
        logger.info("Contacts service started")

    async def stop(self) -> None:
        await self.notifier.stop()
        await self.bus.stop()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("Contacts service stopped")


def build_container(
    settings: Settings,
    *,
    store: IContactStore | None = None,
    bus: MemoryEventBus | RedisStreamsBus | IEventPublisher | None = None,
    clock: IClock | None = None,
    use_null_pool: bool = False,
) -> Container:
    """Wire store, bus, notifier and service from *settings*."""
    engine: AsyncEngine | None = None
    if store is None:
        if settings.database.backend == "memory":
            store = InMemoryContactStore()
        else:
            engine = engine_from_config(settings.database, use_null_pool=use_null_pool)
            store = SqlContactStore(engine, batch_size=settings.database.stream_batch_size)

    if bus is None:
        bus = create_event_bus(settings.event_bus, settings.notifier)

    notifier = ContactEventNotifier(bus, settings.notifier)
    service = ContactService(
        store,
        notifier,
        clock=clock,
        list_timeout=settings.http.list_timeout,
    )
    return Container(
        settings=settings,
        store=store,
        bus=bus,
        notifier=notifier,
        service=service,
        engine=engine,
    )
