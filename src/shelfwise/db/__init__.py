# ABOUTME: Public API for the Shelfwise library database layer.
# ABOUTME: Exports connection management, the ingestion catalog, and row types.

from shelfwise.db.catalog import DatabaseError, DuplicateBookError, LibraryCatalog, LibraryReader
from shelfwise.db.connection import DEFAULT_DB_PATH, open_library
from shelfwise.db.mapping import (
    AuthorRecord,
    IngestRecord,
    LibraryAuthor,
    LibraryBook,
    LibrarySeries,
    SeriesEntry,
    SeriesRecord,
)

__all__ = [
    "DEFAULT_DB_PATH",
    "AuthorRecord",
    "DatabaseError",
    "DuplicateBookError",
    "IngestRecord",
    "LibraryAuthor",
    "LibraryBook",
    "LibraryCatalog",
    "LibraryReader",
    "LibrarySeries",
    "SeriesEntry",
    "SeriesRecord",
    "open_library",
]
