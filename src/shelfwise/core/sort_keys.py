# ABOUTME: Sort-key resolution for a freshly extracted book, preferring keys already in the library.
# ABOUTME: Looks up each author and series concurrently, falling back to the naming heuristics.

import asyncio
import logging
import sqlite3
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from shelfwise.catalog.sorting import name_sort_key, title_sort_key
from shelfwise.catalog.types import BookMetadata, Contributor, SeriesMembership
from shelfwise.db.mapping import AuthorRecord, IngestRecord, SeriesRecord

logger = logging.getLogger(__name__)


class SortKeyLookup(Protocol):
    """Read-only access to sort keys the library already stores."""

    async def find_author_sort(self, name: str) -> str | None: ...

    async def find_series_sort(self, name: str) -> str | None: ...


async def _stored_or_heuristic(
    lookup: Callable[[str], Awaitable[str | None]],
    fallback: Callable[[str], str],
    name: str,
) -> str:
    """Use a stored sort key if the library has one, otherwise compute it."""
    try:
        stored = await lookup(name)
    except sqlite3.Error as exc:
        logger.warning("Sort key lookup failed for %r, using heuristic: %s", name, exc)
        stored = None
    return stored if stored is not None else fallback(name)


async def resolve_author_sorts(
    reader: SortKeyLookup, authors: Sequence[Contributor]
) -> list[str]:
    """Resolve a sort key for every author, in input order."""
    return list(
        await asyncio.gather(
            *(
                _stored_or_heuristic(reader.find_author_sort, name_sort_key, a.name)
                for a in authors
            )
        )
    )


async def resolve_series_sorts(
    reader: SortKeyLookup, memberships: Sequence[SeriesMembership]
) -> list[str]:
    """Resolve a sort key for every series, in input order."""
    return list(
        await asyncio.gather(
            *(
                _stored_or_heuristic(reader.find_series_sort, title_sort_key, m.title)
                for m in memberships
            )
        )
    )


async def build_ingest_record(metadata: BookMetadata, reader: SortKeyLookup) -> IngestRecord:
    """Combine extracted metadata with resolved sort keys into an IngestRecord.

    Only contributors that survive the author filter are kept. The book's own
    title sort always comes from the heuristic.
    """
    authors = metadata.authors
    author_sorts, series_sorts = await asyncio.gather(
        resolve_author_sorts(reader, authors),
        resolve_series_sorts(reader, metadata.series),
    )

    return IngestRecord(
        title=metadata.title,
        sort=title_sort_key(metadata.title),
        external_id=int(metadata.external_id),
        page_count=metadata.page_count,
        date_published=metadata.publication_date,
        authors=[
            AuthorRecord(name=a.name, sort=sort, external_id=int(a.external_id))
            for a, sort in zip(authors, author_sorts, strict=True)
        ],
        series=[
            SeriesRecord(
                name=m.title,
                sort=sort,
                position=m.position,
                external_id=int(m.external_id),
            )
            for m, sort in zip(metadata.series, series_sorts, strict=True)
        ],
    )
