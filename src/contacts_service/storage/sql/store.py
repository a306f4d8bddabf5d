"""SQL-backed contact store.

Inserts go through a short-lived ORM session. Full reads go through a
dedicated pooled connection and a server-side cursor: rows are fetched in
batches of ``batch_size`` and selected as plain columns, so neither the
driver nor an ORM identity map accumulates the whole table.

Driver and SQLAlchemy errors are translated into
:class:`~contacts_service.core.errors.StorageError` with the original
exception chained.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing, asynccontextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncResult, AsyncSession, async_sessionmaker

from contacts_service.core.errors import StorageError
from contacts_service.core.models import Contact

from .connection import create_session_factory
from .models import ContactRecord

logger = logging.getLogger(__name__)

# Errors that mean "the medium is unreachable or refused the operation".
_STORAGE_FAILURES = (SQLAlchemyError, OSError)


class SqlContactStore:
    """Contact store on top of an SQLAlchemy :class:`AsyncEngine`."""

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        batch_size: int = 500,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._engine = engine
        self._batch_size = batch_size
        self._session_factory = session_factory or create_session_factory(engine)

    async def insert(self, name: str) -> Contact:
        """Insert one contact and return it with its generated id."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    record = ContactRecord(name=name)
                    session.add(record)
                    await session.flush()
                    contact = Contact(id=record.id, name=record.name)
        except _STORAGE_FAILURES as exc:
            logger.error("Contact insert failed: %s", exc)
            raise StorageError("Failed to persist contact") from exc

        logger.debug("Inserted contact id=%s", contact.id)
        return contact

    @asynccontextmanager
    async def stream_all(self) -> AsyncIterator[AsyncIterator[Contact]]:
        """Stream every contact ordered by id over a server-side cursor."""
        stmt = (
            select(ContactRecord.id, ContactRecord.name)
            .order_by(ContactRecord.id.asc())
            .execution_options(yield_per=self._batch_size)
        )

        try:
            conn = await self._engine.connect()
        except _STORAGE_FAILURES as exc:
            raise StorageError("Failed to open contacts stream") from exc

        try:
            try:
                result = await conn.stream(stmt)
            except _STORAGE_FAILURES as exc:
                raise StorageError("Failed to open contacts stream") from exc

            logger.debug("Opened contacts stream (batch_size=%d)", self._batch_size)
            try:
                async with aclosing(self._iter_rows(result)) as rows:
                    yield rows
            finally:
                await result.close()
        finally:
            await conn.close()
            logger.debug("Released contacts stream connection")

    @staticmethod
    async def _iter_rows(result: AsyncResult) -> AsyncIterator[Contact]:
        try:
            async for row in result:
                yield Contact(id=row.id, name=row.name)
        except SQLAlchemyError as exc:
            raise StorageError("Contacts stream failed while fetching") from exc

    async def count(self) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(func.count()).select_from(ContactRecord)
                )
                return int(result.scalar_one())
        except _STORAGE_FAILURES as exc:
            raise StorageError("Failed to count contacts") from exc
