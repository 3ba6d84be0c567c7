# ABOUTME: Unit tests for reading identifying metadata out of EPUB files.
# ABOUTME: Covers title, author and ISBN extraction plus unreadable inputs.

from pathlib import Path

import pytest
from ebooklib import epub

from shelfwise.formats.epub import EpubReadError, _get_isbn, _get_title, read_basic_info


class TestReadBasicInfo:
    """Tests for read_basic_info()."""

    def test_title_and_author(self, fire_epub: Path) -> None:
        """Title and creator names are read."""
        info = read_basic_info(fire_epub)
        assert info.title == "Fire"
        assert info.authors == ["Kristin Cashore"]
        assert info.isbn is None

    def test_isbn_identifier(self, fire_isbn_epub: Path) -> None:
        """An ISBN-shaped identifier is picked up."""
        assert read_basic_info(fire_isbn_epub).isbn == "9780803734616"

    def test_multiple_authors(self, make_epub) -> None:
        """Every creator is returned in order."""
        path = make_epub("good-omens.epub", "Good Omens", ["Terry Pratchett", "Neil Gaiman"])
        assert read_basic_info(path).authors == ["Terry Pratchett", "Neil Gaiman"]

    def test_no_authors(self, make_epub) -> None:
        """A book without creators has an empty author list."""
        path = make_epub("anon.epub", "Beowulf")
        assert read_basic_info(path).authors == []

    def test_missing_file(self, tmp_path: Path) -> None:
        """A nonexistent path raises EpubReadError."""
        with pytest.raises(EpubReadError, match="not found"):
            read_basic_info(tmp_path / "missing.epub")

    def test_corrupt_file(self, corrupt_epub: Path) -> None:
        """A file that isn't an EPUB raises EpubReadError."""
        with pytest.raises(EpubReadError):
            read_basic_info(corrupt_epub)


class TestMetadataHelpers:
    """Tests for the in-memory metadata helpers."""

    def test_no_title(self) -> None:
        """A book without dc:title has no title."""
        assert _get_title(epub.EpubBook()) is None

    def test_hyphenated_isbn_with_prefix(self) -> None:
        """urn:isbn: prefixes and hyphens are dropped."""
        book = epub.EpubBook()
        book.set_identifier("urn:isbn:978-0-8037-3461-6")
        assert _get_isbn(book) == "9780803734616"

    def test_non_isbn_identifier(self) -> None:
        """UUID identifiers are not mistaken for ISBNs."""
        book = epub.EpubBook()
        book.set_identifier("urn:uuid:0a1b2c3d-0000-4000-8000-000000000000")
        assert _get_isbn(book) is None
