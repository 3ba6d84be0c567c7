# ABOUTME: Library row types and conversions between SQLite rows and dataclasses.
# ABOUTME: IngestRecord is the fully assembled, sort-keyed input to the ingestion transaction.

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Stored timestamps use the same format as the schema's strftime defaults.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class AuthorRecord:
    """An author to upsert, keyed by its catalog identifier."""

    name: str
    sort: str
    external_id: int


@dataclass(frozen=True)
class SeriesRecord:
    """A series to upsert plus this book's position within it."""

    name: str
    sort: str
    position: float
    external_id: int


@dataclass(frozen=True)
class IngestRecord:
    """Everything the ingestion transaction writes for one book."""

    title: str
    sort: str
    external_id: int
    page_count: int | None = None
    date_published: datetime | None = None
    authors: list[AuthorRecord] = field(default_factory=list)
    series: list[SeriesRecord] = field(default_factory=list)


@dataclass
class LibraryBook:
    """A cataloged book row."""

    id: int
    title: str
    sort: str
    page_count: int | None
    external_id: int
    date_added: datetime
    date_published: datetime | None
    date_modified: datetime


@dataclass
class LibraryAuthor:
    """A cataloged author row."""

    id: int
    name: str
    sort: str
    external_id: int


@dataclass
class LibrarySeries:
    """A cataloged series row."""

    id: int
    name: str
    sort: str
    external_id: int


@dataclass
class SeriesEntry:
    """A series a book belongs to, with the book's position in it."""

    series: LibrarySeries
    position: float


def format_timestamp(value: datetime) -> str:
    """Serialize a datetime as a naive UTC timestamp string."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    # strftime("%Y") does not zero-pad years before 1000 on every platform.
    return f"{value.year:04d}" + value.strftime(TIMESTAMP_FORMAT.removeprefix("%Y"))


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored timestamp back into an aware UTC datetime."""
    if not value:
        return None
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def row_to_book(row: Any) -> LibraryBook:
    """Convert a books table row to a LibraryBook."""
    added = parse_timestamp(row["date_added"])
    modified = parse_timestamp(row["last_modified"])
    assert added is not None and modified is not None
    return LibraryBook(
        id=row["id"],
        title=row["title"],
        sort=row["sort"],
        page_count=row["number_of_pages"],
        external_id=row["goodreads_id"],
        date_added=added,
        date_published=parse_timestamp(row["date_published"]),
        date_modified=modified,
    )


def row_to_author(row: Any) -> LibraryAuthor:
    """Convert an authors table row to a LibraryAuthor."""
    return LibraryAuthor(
        id=row["id"],
        name=row["name"],
        sort=row["sort"],
        external_id=row["goodreads_id"],
    )


def row_to_series(row: Any) -> LibrarySeries:
    """Convert a series table row to a LibrarySeries."""
    return LibrarySeries(
        id=row["id"],
        name=row["name"],
        sort=row["sort"],
        external_id=row["goodreads_id"],
    )
