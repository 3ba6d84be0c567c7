# ABOUTME: Add-book pipeline: EPUB -> catalog lookup -> sort keys -> atomic library ingest.
# ABOUTME: Signals a library change once per committed book; batch import tallies outcomes.

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from shelfwise.catalog.errors import CatalogError, ParseError, ScrapeError
from shelfwise.catalog.request import (
    IdentifierResolver,
    MetadataRequest,
    RecordFetcher,
    by_isbn,
    by_title,
)
from shelfwise.catalog.types import BookMetadata
from shelfwise.core.sort_keys import build_ingest_record
from shelfwise.db.catalog import DatabaseError, DuplicateBookError, LibraryCatalog
from shelfwise.formats.epub import BasicBookInfo, EpubReadError, read_basic_info

logger = logging.getLogger(__name__)

# Called with no arguments after each successful commit.
ChangeListener = Callable[[], None]


class MetadataNotFoundError(Exception):
    """Raised when no catalog record could be resolved for the given input."""


@dataclass
class AddResult:
    """Outcome of adding a single book."""

    book_id: int
    metadata: BookMetadata


@dataclass
class ImportResult:
    """Summary of a batch import."""

    added: int = 0
    duplicates: int = 0
    not_found: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)


def request_for(info: BasicBookInfo) -> MetadataRequest:
    """Pick the most specific title-based request for what the ebook records."""
    request = by_title(info.title)
    if info.authors:
        return request.with_author(info.authors[0])
    return request


async def fetch_metadata(
    request: MetadataRequest,
    *,
    resolver: IdentifierResolver,
    fetcher: RecordFetcher,
) -> BookMetadata:
    """Execute a request, treating "no match" as an error.

    Raises:
        MetadataNotFoundError: If the request resolves to no catalog record.
        CatalogError: If fetching or parsing a catalog page fails.
    """
    metadata = await request.execute(resolver, fetcher)
    if metadata is None:
        raise MetadataNotFoundError(f"No metadata found for {request}")
    return metadata


async def _resolve(
    info: BasicBookInfo, resolver: IdentifierResolver, fetcher: RecordFetcher
) -> BookMetadata:
    if info.isbn:
        try:
            return await fetch_metadata(by_isbn(info.isbn), resolver=resolver, fetcher=fetcher)
        except (ScrapeError, ParseError, MetadataNotFoundError) as exc:
            logger.info("ISBN lookup for %s failed (%s), trying title", info.isbn, exc)
    return await fetch_metadata(request_for(info), resolver=resolver, fetcher=fetcher)


async def add_book(
    path: Path,
    *,
    resolver: IdentifierResolver,
    fetcher: RecordFetcher,
    catalog: LibraryCatalog,
    on_change: ChangeListener | None = None,
) -> AddResult:
    """Identify an EPUB against the catalog and file it into the library.

    Uses the ebook's ISBN when it records one, falling back to title and
    first author. Sort keys already stored for an author or series take
    precedence over the heuristics.

    Args:
        path: The EPUB to add.
        resolver: Catalog matching client.
        fetcher: Record page extractor.
        catalog: The library to ingest into.
        on_change: Called once after the book is committed.

    Returns:
        AddResult with the new book's row ID and the metadata that was stored.

    Raises:
        EpubReadError: If the EPUB cannot be read.
        MetadataNotFoundError: If no catalog record matches.
        CatalogError: If a catalog request or page parse fails.
        DuplicateBookError: If the book is already in the library.
        DatabaseError: If the ingest transaction fails.
    """
    info = read_basic_info(path)
    logger.info("Adding %r from %s", info.title, path.name)

    metadata = await _resolve(info, resolver, fetcher)
    record = await build_ingest_record(metadata, catalog.reader())
    book_id = await catalog.ingest(record)

    if on_change is not None:
        on_change()
    return AddResult(book_id=book_id, metadata=metadata)


async def import_books(
    paths: list[Path],
    *,
    resolver: IdentifierResolver,
    fetcher: RecordFetcher,
    catalog: LibraryCatalog,
    on_change: ChangeListener | None = None,
) -> ImportResult:
    """Add several EPUBs one after another, recording each outcome.

    A failure on one file never stops the batch.
    """
    result = ImportResult()

    for epub_path in paths:
        try:
            await add_book(
                epub_path,
                resolver=resolver,
                fetcher=fetcher,
                catalog=catalog,
                on_change=on_change,
            )
            result.added += 1
        except DuplicateBookError:
            result.duplicates += 1
        except MetadataNotFoundError:
            result.not_found += 1
        except (EpubReadError, CatalogError, DatabaseError) as exc:
            logger.warning("Failed to add %s: %s", epub_path, exc)
            result.errors += 1
            result.error_details.append((epub_path, str(exc)))

    return result
