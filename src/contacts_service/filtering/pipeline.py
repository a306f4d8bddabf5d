"""Exclusion filter over a stream of contacts.

Both variants pull one record at a time from the source and decide on it
before asking for the next, so memory use does not grow with the input.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from contacts_service.core.models import Contact

from .pattern import NameMatcher


async def filter_excluding(
    matcher: NameMatcher,
    records: AsyncIterable[Contact],
) -> AsyncIterator[Contact]:
    """Yield the records whose name does *not* match, in input order."""
    async for record in records:
        if not matcher.matches(record.name):
            yield record


def filter_excluding_sync(
    matcher: NameMatcher,
    records: Iterable[Contact],
) -> Iterator[Contact]:
    """Synchronous counterpart of :func:`filter_excluding`."""
    for record in records:
        if not matcher.matches(record.name):
            yield record
