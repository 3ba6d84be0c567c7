# ABOUTME: Minimal EPUB reading using ebooklib: just the title and creator names.
# ABOUTME: Supplies the loose identifying input that the catalog lookup starts from.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ebooklib import epub

logger = logging.getLogger(__name__)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or has no title."""


@dataclass
class BasicBookInfo:
    """Title, author names and ISBN as recorded inside an ebook file."""

    title: str
    authors: list[str] = field(default_factory=list)
    isbn: str | None = None


def _get_title(book: epub.EpubBook) -> str | None:
    values = book.get_metadata("DC", "title")
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_authors(book: epub.EpubBook) -> list[str]:
    creators = book.get_metadata("DC", "creator")
    if not creators:
        return []
    return [str(entry[0]).strip() for entry in creators if entry[0] and str(entry[0]).strip()]


def _get_isbn(book: epub.EpubBook) -> str | None:
    """Find an ISBN among the dc:identifier entries, if any."""
    for value, attrs in book.get_metadata("DC", "identifier"):
        if not value:
            continue
        # The scheme attribute may come back namespaced after a round trip.
        scheme = next((str(v) for k, v in attrs.items() if k.endswith("scheme")), "").lower()
        cleaned = str(value).strip().removeprefix("urn:isbn:").replace("-", "").replace(" ", "")
        if scheme.startswith("isbn") or (
            len(cleaned) in (10, 13) and cleaned.rstrip("Xx").isdigit()
        ):
            return cleaned
    return None


def read_basic_info(path: Path) -> BasicBookInfo:
    """Extract the title, authors and ISBN from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        BasicBookInfo with the title, zero or more author names, and the ISBN if one is recorded.

    Raises:
        EpubReadError: If the file cannot be opened or has no title.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB {path}: {exc}") from exc

    title = _get_title(book)
    if not title:
        raise EpubReadError(f"EPUB has no title: {path}")

    info = BasicBookInfo(title=title, authors=_get_authors(book), isbn=_get_isbn(book))
    logger.debug("Read %r by %s from %s", info.title, info.authors, path.name)
    return info
