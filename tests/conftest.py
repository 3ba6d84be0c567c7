# ABOUTME: Shared pytest fixtures for Shelfwise tests.
# ABOUTME: Provides sample EPUB files, a fresh library database, and a catalog over it.

from collections.abc import AsyncIterator, Callable
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from ebooklib import epub

from shelfwise.db.catalog import LibraryCatalog
from shelfwise.db.connection import open_library

EpubFactory = Callable[..., Path]


def write_epub(
    path: Path,
    title: str | None,
    authors: list[str] | None = None,
    identifier: str | None = None,
) -> Path:
    """Write a minimal, structurally valid EPUB with the given metadata."""
    book = epub.EpubBook()
    book.set_identifier(identifier or f"urn:uuid:{path.stem}")
    if title is not None:
        book.set_title(title)
    book.set_language("en")
    for author in authors or []:
        book.add_author(author)

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def make_epub(tmp_path: Path) -> EpubFactory:
    """Factory for EPUB files under tmp_path."""

    def _make(
        name: str,
        title: str | None,
        authors: list[str] | None = None,
        identifier: str | None = None,
    ) -> Path:
        return write_epub(tmp_path / name, title, authors, identifier)

    return _make


@pytest.fixture
def fire_epub(make_epub: EpubFactory) -> Path:
    """An EPUB of "Fire" by Kristin Cashore with no ISBN."""
    return make_epub("fire.epub", "Fire", ["Kristin Cashore"])


@pytest.fixture
def fire_isbn_epub(make_epub: EpubFactory) -> Path:
    """An EPUB of "Fire" whose identifier is its ISBN-13."""
    return make_epub("fire-isbn.epub", "Fire", ["Kristin Cashore"], identifier="9780803734616")


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """Create a corrupt file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Location for a throwaway library database."""
    return tmp_path / "library.db"


@pytest_asyncio.fixture
async def conn(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """An open, schema-initialized library connection."""
    connection = await open_library(db_path)
    try:
        yield connection
    finally:
        await connection.close()


@pytest.fixture
def catalog(conn: aiosqlite.Connection) -> LibraryCatalog:
    """A LibraryCatalog over the fresh library."""
    return LibraryCatalog(conn)
