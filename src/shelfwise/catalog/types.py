# ABOUTME: Core data structures for book metadata resolved from the online catalog.
# ABOUTME: BookMetadata is the interchange format between extraction, sort keys, and ingestion.

from dataclasses import dataclass, field
from datetime import datetime

AUTHOR_ROLE = "Author"


@dataclass(frozen=True)
class Contributor:
    """A person credited on a book, such as an author or illustrator."""

    name: str
    role: str
    external_id: str


@dataclass(frozen=True)
class SeriesMembership:
    """A book's place in a series.

    Position is a float so that novellas between volumes (e.g. 1.5) keep
    their ordering.
    """

    title: str
    position: float
    external_id: str


@dataclass
class BookMetadata:
    """Structured metadata for a single catalog record.

    Created once per resolution call and folded into library rows on ingest.
    Only title and external_id are guaranteed; every other field may be
    missing from the catalog page. Publisher, ISBN, language and genres are
    extracted for display but are not persisted.
    """

    title: str
    external_id: str
    publication_date: datetime | None = None
    page_count: int | None = None
    image_url: str | None = None
    contributors: list[Contributor] = field(default_factory=list)
    series: list[SeriesMembership] = field(default_factory=list)
    publisher: str | None = None
    isbn: str | None = None
    language: str | None = None
    genres: list[str] = field(default_factory=list)

    @property
    def authors(self) -> list[Contributor]:
        """Contributors credited as authors.

        The first contributor is the catalog's primary credit and is always
        kept, whatever its role.
        """
        return [
            c
            for i, c in enumerate(self.contributors)
            if i == 0 or c.role == AUTHOR_ROLE
        ]

    @property
    def author(self) -> str:
        """Convenience property: joined author names for display."""
        return ", ".join(c.name for c in self.authors)
