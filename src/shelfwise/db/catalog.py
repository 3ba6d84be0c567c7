# ABOUTME: Atomic ingestion and read queries for the Shelfwise library catalog.
# ABOUTME: Inserts a book with upserted authors and series in one all-or-nothing transaction.

import asyncio
import logging
import sqlite3
from datetime import UTC, datetime

import aiosqlite

from shelfwise.db.mapping import (
    IngestRecord,
    LibraryAuthor,
    LibraryBook,
    LibrarySeries,
    SeriesEntry,
    format_timestamp,
    row_to_author,
    row_to_book,
    row_to_series,
)

logger = logging.getLogger(__name__)

_BOOK_UNIQUE_VIOLATION = "UNIQUE constraint failed: books.goodreads_id"

_INSERT_BOOK = (
    "INSERT INTO books "
    "(title, sort, date_added, date_published, last_modified, number_of_pages, goodreads_id) "
    "VALUES (?, ?, ?, ?, ?, ?, ?)"
)
_UPSERT_AUTHOR = (
    "INSERT INTO authors (name, sort, goodreads_id) VALUES (?, ?, ?) "
    "ON CONFLICT (goodreads_id) DO UPDATE SET name = excluded.name, sort = excluded.sort "
    "RETURNING id"
)
_LINK_AUTHOR = (
    "INSERT INTO books_authors_link (book, author) VALUES (?, ?) "
    "ON CONFLICT (book, author) DO NOTHING"
)
_UPSERT_SERIES = (
    "INSERT INTO series (name, sort, goodreads_id) VALUES (?, ?, ?) "
    "ON CONFLICT (goodreads_id) DO UPDATE SET name = excluded.name, sort = excluded.sort "
    "RETURNING id"
)
_LINK_SERIES = "INSERT INTO books_series_link (book, series, entry) VALUES (?, ?, ?)"


class DuplicateBookError(Exception):
    """Raised when a book with the same catalog identifier is already in the library."""

    def __init__(self, external_id: int) -> None:
        super().__init__(f"Book with catalog id {external_id} already exists")
        self.external_id = external_id


class DatabaseError(Exception):
    """Raised when the library database fails for any reason other than a duplicate book."""


class LibraryReader:
    """Read-only view of the library used while resolving sort keys.

    Shares the catalog's connection and lock, so a lookup never observes a
    half-written ingest.
    """

    def __init__(self, conn: aiosqlite.Connection, lock: asyncio.Lock) -> None:
        self._conn = conn
        self._lock = lock

    async def find_author_sort(self, name: str) -> str | None:
        """Return the stored sort key for an author with this exact name."""
        return await self._find_sort("authors", name)

    async def find_series_sort(self, name: str) -> str | None:
        """Return the stored sort key for a series with this exact name."""
        return await self._find_sort("series", name)

    async def _find_sort(self, table: str, name: str) -> str | None:
        async with self._lock:
            cursor = await self._conn.execute(
                f"SELECT sort FROM {table} WHERE name = ? ORDER BY id LIMIT 1", (name,)
            )
            row = await cursor.fetchone()
        return row[0] if row else None


class LibraryCatalog:
    """Wraps an aiosqlite connection and provides ingestion and typed reads.

    All statements on the connection are serialized through one lock so that
    an open ingest transaction is never shared with another coroutine.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._lock = asyncio.Lock()

    def reader(self) -> LibraryReader:
        """Return a read-only handle for concurrent sort-key lookups."""
        return LibraryReader(self._conn, self._lock)

    async def ingest(self, record: IngestRecord) -> int:
        """Insert a book together with its authors, series and link rows.

        Authors and series are upserted by catalog identifier: an existing row
        keeps its id and takes the new name and sort key. Author links that
        already exist are left alone; a repeated book/series link is an error.
        Either everything commits or nothing does.

        Args:
            record: The book plus resolved sort keys for it, its authors and
                its series.

        Returns:
            The row ID of the inserted book.

        Raises:
            DuplicateBookError: If a book with this catalog identifier exists.
            DatabaseError: On any other database failure.
        """
        now = format_timestamp(datetime.now(UTC))
        published = (
            format_timestamp(record.date_published) if record.date_published else None
        )

        async with self._lock:
            try:
                await self._conn.execute("BEGIN IMMEDIATE")
                try:
                    cursor = await self._conn.execute(
                        _INSERT_BOOK,
                        (
                            record.title,
                            record.sort,
                            now,
                            published,
                            now,
                            record.page_count,
                            record.external_id,
                        ),
                    )
                except sqlite3.IntegrityError as exc:
                    if _BOOK_UNIQUE_VIOLATION in str(exc):
                        raise DuplicateBookError(record.external_id) from exc
                    raise
                book_id = cursor.lastrowid
                assert book_id is not None

                for author in record.authors:
                    author_id = await self._upsert(
                        _UPSERT_AUTHOR, (author.name, author.sort, author.external_id)
                    )
                    await self._conn.execute(_LINK_AUTHOR, (book_id, author_id))

                for series in record.series:
                    series_id = await self._upsert(
                        _UPSERT_SERIES, (series.name, series.sort, series.external_id)
                    )
                    await self._conn.execute(
                        _LINK_SERIES, (book_id, series_id, series.position)
                    )

                await self._conn.execute("COMMIT")
            except DuplicateBookError:
                await self._conn.rollback()
                logger.info("Book %d already in library", record.external_id)
                raise
            except sqlite3.Error as exc:
                await self._conn.rollback()
                logger.error("Failed to add book %d: %s", record.external_id, exc)
                raise DatabaseError(f"Failed to add book {record.external_id}: {exc}") from exc
            except BaseException:
                await self._conn.rollback()
                raise

        logger.info(
            "Added book %d (%r) with %d author(s) and %d series",
            book_id,
            record.title,
            len(record.authors),
            len(record.series),
        )
        return book_id

    async def _upsert(self, sql: str, params: tuple[object, ...]) -> int:
        cursor = await self._conn.execute(sql, params)
        row = await cursor.fetchone()
        await cursor.close()
        if row is None:
            raise DatabaseError("Upsert returned no row id")
        return row[0]

    async def get_book(self, book_id: int) -> LibraryBook | None:
        """Retrieve a book by its row ID."""
        row = await self._fetch_one("SELECT * FROM books WHERE id = ?", (book_id,))
        return row_to_book(row) if row else None

    async def get_book_by_external_id(self, external_id: int) -> LibraryBook | None:
        """Retrieve a book by its catalog identifier."""
        row = await self._fetch_one(
            "SELECT * FROM books WHERE goodreads_id = ?", (external_id,)
        )
        return row_to_book(row) if row else None

    async def get_author_by_external_id(self, external_id: int) -> LibraryAuthor | None:
        """Retrieve an author by catalog identifier."""
        row = await self._fetch_one(
            "SELECT * FROM authors WHERE goodreads_id = ?", (external_id,)
        )
        return row_to_author(row) if row else None

    async def get_series_by_external_id(self, external_id: int) -> LibrarySeries | None:
        """Retrieve a series by catalog identifier."""
        row = await self._fetch_one(
            "SELECT * FROM series WHERE goodreads_id = ?", (external_id,)
        )
        return row_to_series(row) if row else None

    async def list_books(self) -> list[LibraryBook]:
        """Return all books in the order they were added."""
        rows = await self._fetch_all("SELECT * FROM books ORDER BY date_added, id")
        return [row_to_book(row) for row in rows]

    async def count_books(self) -> int:
        """Return the number of books in the library."""
        row = await self._fetch_one("SELECT COUNT(*) FROM books", ())
        return row[0] if row else 0

    async def authors_for_book(self, book_id: int) -> list[LibraryAuthor]:
        """Get a book's authors in link order."""
        rows = await self._fetch_all(
            "SELECT a.* FROM authors a "
            "JOIN books_authors_link bal ON a.id = bal.author "
            "WHERE bal.book = ? "
            "ORDER BY bal.id",
            (book_id,),
        )
        return [row_to_author(row) for row in rows]

    async def series_for_book(self, book_id: int) -> list[SeriesEntry]:
        """Get the series a book belongs to, with its position in each."""
        rows = await self._fetch_all(
            "SELECT s.*, bsl.entry FROM series s "
            "JOIN books_series_link bsl ON s.id = bsl.series "
            "WHERE bsl.book = ? "
            "ORDER BY bsl.id",
            (book_id,),
        )
        return [SeriesEntry(series=row_to_series(row), position=row["entry"]) for row in rows]

    async def _fetch_one(self, sql: str, params: tuple[object, ...]) -> sqlite3.Row | None:
        async with self._lock:
            cursor = await self._conn.execute(sql, params)
            row = await cursor.fetchone()
            await cursor.close()
        return row

    async def _fetch_all(
        self, sql: str, params: tuple[object, ...] = ()
    ) -> list[sqlite3.Row]:
        async with self._lock:
            cursor = await self._conn.execute(sql, params)
            rows = await cursor.fetchall()
            await cursor.close()
        return list(rows)
