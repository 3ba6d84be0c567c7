# ABOUTME: Extraction of BookMetadata from a catalog record page's embedded object graph.
# ABOUTME: Title and the book entity are mandatory; every other field degrades to None or empty.

import json
import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

from bs4 import BeautifulSoup

from shelfwise.catalog.errors import ParseError, ScrapeError
from shelfwise.catalog.graph import (
    GraphLookupError,
    Node,
    ReferenceGraph,
    dig,
    normalize_text,
    reference_key,
    text_at,
)
from shelfwise.catalog.http import HttpClient
from shelfwise.catalog.identifiers import id_from_author_url, id_from_series_url, record_url
from shelfwise.catalog.matching import NEXT_DATA_SELECTOR
from shelfwise.catalog.types import AUTHOR_ROLE, BookMetadata, Contributor, SeriesMembership

logger = logging.getLogger(__name__)

_UNKNOWN_AUTHOR = "unknown author"
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

T = TypeVar("T")


def book_query_key(external_id: str) -> str:
    """The ROOT_QUERY entry under which the page's book is registered."""
    return f'getBookByLegacyId({{"legacyId":"{external_id}"}})'


def parse_page_data(html: str) -> dict[str, Any]:
    """Decode the JSON payload embedded in a record page.

    Raises:
        ScrapeError: If the page has no __NEXT_DATA__ script.
        ParseError: If the script body is not a JSON object.
    """
    soup = BeautifulSoup(html, "html.parser")
    script = soup.select_one(NEXT_DATA_SELECTOR)
    if script is None:
        logger.error("Record page has no embedded page data")
        raise ScrapeError("Failed to scrape book metadata")
    try:
        data = json.loads(script.string or "")
    except json.JSONDecodeError as exc:
        raise ParseError(f"Embedded page data is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("Embedded page data is not a JSON object")
    return data


def _optional(label: str, extract: Callable[[], T], default: T) -> T:
    """Run a single optional-field extractor, logging and defaulting on failure."""
    try:
        return extract()
    except (ParseError, ValueError, TypeError) as exc:
        logger.warning("Failed to extract %s: %s", label, exc)
        return default


def _resolve_book(graph: ReferenceGraph, external_id: str) -> Node:
    try:
        key = graph.root_reference(book_query_key(external_id))
        return graph.node(key)
    except GraphLookupError as exc:
        logger.error("Failed to resolve book entity for %s", external_id)
        raise ScrapeError(f"Failed to resolve book entity for {external_id}") from exc


def _extract_title(book: Node) -> str:
    raw = text_at(book, "title")
    if raw is None:
        logger.error("Failed to scrape book title")
        raise ScrapeError("Failed to scrape book title")
    # Subtitles follow the first colon and are not kept.
    title = normalize_text(raw.split(":", 1)[0])
    if title is None:
        raise ScrapeError("Failed to scrape book title")
    return title


def _extract_isbn(book: Node) -> str | None:
    return (
        text_at(book, "details", "isbn")
        or text_at(book, "details", "isbn13")
        or text_at(book, "details", "asin")
    )


def _extract_page_count(book: Node) -> int | None:
    count = dig(book, "details", "numPages")
    if isinstance(count, bool) or not isinstance(count, int):
        return None
    return count if count > 0 else None


def _extract_publication_date(book: Node) -> datetime | None:
    """Publication time is epoch milliseconds; any other shape is treated as absent."""
    raw = dig(book, "details", "publicationTime")
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        logger.warning("Ignoring non-numeric publication time %r", raw)
        return None
    try:
        return _EPOCH + timedelta(milliseconds=raw)
    except OverflowError:
        logger.warning("Publication time %r out of range", raw)
        return None


def _extract_genres(book: Node) -> list[str]:
    genres: list[str] = []
    for entry in dig(book, "bookGenres") or []:
        name = text_at(entry, "genre", "name") if isinstance(entry, dict) else None
        if name is None:
            logger.warning("Failed to parse genre name")
            continue
        genres.append(name)
    return genres


def _person_id(person: Node) -> str:
    legacy_id = person.get("legacyId")
    if isinstance(legacy_id, int) and not isinstance(legacy_id, bool):
        return str(legacy_id)
    web_url = text_at(person, "webUrl")
    if web_url is None:
        raise ParseError("Contributor has neither legacyId nor webUrl")
    return id_from_author_url(web_url)


def _contributor(graph: ReferenceGraph, role: str, person_key: str) -> Contributor | None:
    try:
        person = graph.node(person_key)
        name = text_at(person, "name")
        if name is None:
            raise ParseError(f"Contributor {person_key} has no name")
        return Contributor(name=name, role=role, external_id=_person_id(person))
    except ParseError as exc:
        logger.warning("Failed to parse contributor: %s", exc)
        return None


def _edge(edge: Any) -> tuple[str, str] | None:
    if not isinstance(edge, dict):
        return None
    role = text_at(edge, "role")
    key = reference_key(edge.get("node"))
    if role is None or key is None:
        logger.warning("Failed to parse contributor edge")
        return None
    return role, key


def _extract_contributors(graph: ReferenceGraph, book: Node) -> list[Contributor]:
    """Collect the primary contributor and every secondary contributor credited as Author."""
    contributors: list[Contributor] = []

    primary = book.get("primaryContributorEdge")
    if primary is not None:
        parsed = _edge(primary)
        if parsed is not None:
            found = _contributor(graph, *parsed)
            if found is not None:
                contributors.append(found)

    for edge in book.get("secondaryContributorEdges") or []:
        parsed = _edge(edge)
        if parsed is None:
            continue
        role, key = parsed
        if role != AUTHOR_ROLE:
            logger.debug("Skipping contributor with role %r", role)
            continue
        found = _contributor(graph, role, key)
        if found is not None:
            contributors.append(found)

    return [c for c in contributors if c.name.lower() != _UNKNOWN_AUTHOR]


def _series_entry(graph: ReferenceGraph, entry: Any) -> SeriesMembership | None:
    if not isinstance(entry, dict):
        return None
    raw_position = entry.get("userPosition")
    try:
        if not isinstance(raw_position, str):
            raise ValueError(f"position {raw_position!r} is not a string")
        position = float(raw_position.split("-", 1)[0])
        if not math.isfinite(position):
            raise ValueError(f"position {raw_position!r} is not finite")
    except ValueError as exc:
        logger.warning("Failed to parse series number: %s", exc)
        return None

    try:
        series = graph.follow(entry.get("series"))
        title = text_at(series, "title")
        if title is None:
            raise ParseError("series has no title")
        web_url = text_at(series, "webUrl")
        if web_url is None:
            raise ParseError("series has no webUrl")
        external_id = id_from_series_url(web_url)
    except ParseError as exc:
        logger.warning("Failed to parse series: %s", exc)
        return None

    return SeriesMembership(title=title, position=position, external_id=external_id)


def _extract_series(graph: ReferenceGraph, book: Node) -> list[SeriesMembership]:
    memberships = (_series_entry(graph, entry) for entry in book.get("bookSeries") or [])
    return [m for m in memberships if m is not None]


def extract_book_metadata(data: dict[str, Any], external_id: str) -> BookMetadata:
    """Build BookMetadata from a record page's decoded JSON payload.

    Raises:
        ParseError: If the payload carries no object cache.
        ScrapeError: If the book entity or its title cannot be found.
    """
    graph = ReferenceGraph.from_page_data(data)
    book = _resolve_book(graph, external_id)
    title = _extract_title(book)

    return BookMetadata(
        title=title,
        external_id=external_id,
        publication_date=_optional(
            "publication date", lambda: _extract_publication_date(book), None
        ),
        page_count=_optional("page count", lambda: _extract_page_count(book), None),
        image_url=_optional("image URL", lambda: text_at(book, "imageUrl"), None),
        contributors=_optional(
            "contributors", lambda: _extract_contributors(graph, book), []
        ),
        series=_optional("series", lambda: _extract_series(graph, book), []),
        publisher=_optional("publisher", lambda: text_at(book, "details", "publisher"), None),
        isbn=_optional("ISBN", lambda: _extract_isbn(book), None),
        language=_optional(
            "language", lambda: text_at(book, "details", "language", "name"), None
        ),
        genres=_optional("genres", lambda: _extract_genres(book), []),
    )


class DocumentExtractor:
    """Fetches a book's record page and extracts its metadata."""

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    async def fetch(self, external_id: str) -> BookMetadata:
        """Fetch and extract the record for a known catalog identifier."""
        html = await self._http.get_text(record_url(external_id))
        metadata = extract_book_metadata(parse_page_data(html), external_id)
        logger.info(
            "Extracted %r (%d contributor(s), %d series) for %s",
            metadata.title,
            len(metadata.contributors),
            len(metadata.series),
            external_id,
        )
        return metadata
