# ABOUTME: Search-and-disambiguate client that maps loose book input to a catalog identifier.
# ABOUTME: Scrapes the catalog search page and picks the first fuzzy title/author match.

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup

from shelfwise.catalog.errors import ParseError, ScrapeError
from shelfwise.catalog.graph import dig
from shelfwise.catalog.http import CATALOG_BASE_URL, HttpClient
from shelfwise.catalog.identifiers import id_from_link, leading_digits, record_url

logger = logging.getLogger(__name__)

_SEARCH_URL = f"{CATALOG_BASE_URL}/search"

_TITLE_SELECTOR = 'a[class="bookTitle"]'
_AUTHOR_SELECTOR = 'a[class="authorName"]'
NEXT_DATA_SELECTOR = 'script[id="__NEXT_DATA__"]'

_NON_ALNUM_RE = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class SearchCandidate:
    """One row of a catalog search results page."""

    title: str
    author: str
    external_id: str


def fuzzy_equals(a: str, b: str) -> bool:
    """Loosely compare two titles or names.

    Drops everything but letters and digits, lowercases, then checks whether
    either string contains the other. Containment rather than equality lets
    "Fire (Graceling Realm, #2)" match "Fire" and "J.R.R. Tolkien" match
    "tolkien".
    """
    left = _NON_ALNUM_RE.sub("", a).lower()
    right = _NON_ALNUM_RE.sub("", b).lower()
    return right in left or left in right


def parse_search_results(html: str) -> list[SearchCandidate]:
    """Parse a catalog search results page into candidates.

    Title and author links are paired by position: the Nth title link belongs
    to the Nth author link. Extra links on either side are ignored.

    Raises:
        ParseError: If a title link carries no href.
    """
    soup = BeautifulSoup(html, "html.parser")
    titles = soup.select(_TITLE_SELECTOR)
    authors = soup.select(_AUTHOR_SELECTOR)

    results: list[SearchCandidate] = []
    for title_link, author_link in zip(titles, authors):
        href = title_link.get("href")
        if not href:
            raise ParseError("Failed to extract link from search result")
        results.append(
            SearchCandidate(
                title=title_link.get_text(" ", strip=True),
                author=author_link.get_text(" ", strip=True),
                external_id=id_from_link(str(href)),
            )
        )
    return results


def parse_isbn_search(html: str) -> str:
    """Extract the catalog identifier from the page an ISBN search lands on.

    An ISBN query redirects straight to the record page, whose embedded
    __NEXT_DATA__ payload names the book in props.pageProps.params.book_id
    (e.g. "57945316-the-book-slug").

    Raises:
        ScrapeError: If the page has no __NEXT_DATA__ script.
        ParseError: If the payload is not JSON or lacks the book_id field.
    """
    soup = BeautifulSoup(html, "html.parser")
    script = soup.select_one(NEXT_DATA_SELECTOR)
    if script is None:
        raise ScrapeError("ISBN search result has no embedded page data")

    try:
        data: Any = json.loads(script.string or "")
    except json.JSONDecodeError as exc:
        raise ParseError(f"Embedded page data is not valid JSON: {exc}") from exc

    book_id = dig(data, "props", "pageProps", "params", "book_id")
    if not isinstance(book_id, str):
        raise ParseError("Failed to extract catalog identifier from ISBN search results")
    return leading_digits(book_id)


class CatalogMatcher:
    """Resolves titles, authors and ISBNs to a single catalog identifier.

    Matching is first-match-wins over the catalog's own result ordering; no
    scoring is applied. Uses dependency-injected HttpClient for testability.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    async def search_candidates(self, query: str) -> list[SearchCandidate]:
        """Run one catalog search and return the parsed result rows."""
        html = await self._http.get_text(_SEARCH_URL, params={"q": query})
        candidates = parse_search_results(html)
        logger.debug("Search %r returned %d candidate(s)", query, len(candidates))
        return candidates

    async def resolve_by_title(self, title: str) -> str | None:
        """Find the identifier of the first result whose title matches."""
        for candidate in await self.search_candidates(title):
            if fuzzy_equals(candidate.title, title):
                return candidate.external_id
        logger.info("No title match for %r", title)
        return None

    async def resolve_by_title_author(self, title: str, author: str) -> str | None:
        """Find the identifier of the first result matching both title and author.

        Searches by title alone first to keep the query short, then falls back
        to searching "<title> <author>".
        """
        for query in (title, f"{title} {author}"):
            for candidate in await self.search_candidates(query):
                if fuzzy_equals(candidate.title, title) and fuzzy_equals(
                    candidate.author, author
                ):
                    return candidate.external_id
        logger.info("No title/author match for %r by %r", title, author)
        return None

    async def resolve_by_isbn(self, isbn: str) -> str:
        """Look up the catalog identifier for an ISBN."""
        html = await self._http.get_text(_SEARCH_URL, params={"q": isbn})
        return parse_isbn_search(html)

    async def id_exists(self, external_id: str) -> bool:
        """Check whether the catalog has a record page for this identifier.

        Failures here are not errors: an unreachable page counts as missing.
        """
        return await self._http.exists(record_url(external_id))
