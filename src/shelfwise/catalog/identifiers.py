# ABOUTME: Parsing of numeric catalog identifiers out of links and profile URLs.
# ABOUTME: Rejects identifiers that are not digit runs instead of silently truncating them.

import re

from shelfwise.catalog.errors import ParseError
from shelfwise.catalog.http import CATALOG_BASE_URL

_LEADING_DIGITS_RE = re.compile(r"\d+")

AUTHOR_URL_PREFIX = f"{CATALOG_BASE_URL}/author/show/"
SERIES_URL_PREFIX = f"{CATALOG_BASE_URL}/series/"
RECORD_URL_PREFIX = f"{CATALOG_BASE_URL}/book/show/"


def record_url(external_id: str) -> str:
    """Canonical URL of a book's record page."""
    return f"{RECORD_URL_PREFIX}{external_id}"


def leading_digits(value: str) -> str:
    """Return the run of decimal digits at the start of value.

    Raises:
        ParseError: If value does not start with a digit. Catalog identifiers
            are numeric; anything else means the URL scheme changed.
    """
    match = _LEADING_DIGITS_RE.match(value)
    if match is None:
        raise ParseError(f"No numeric catalog identifier in {value!r}")
    return match.group(0)


def id_from_link(href: str) -> str:
    """Pull the book identifier out of a search result link.

    Accepts site-relative links ("/book/show/123-slug?from_search=true") as
    well as absolute ones. The path segment after /show/ (or the last segment
    if there is none) loses its query string and keeps its leading digits.
    """
    path = href.split("?", 1)[0].split("#", 1)[0]
    if "://" in path:
        path = path.split("://", 1)[1]
        path = path.split("/", 1)[1] if "/" in path else ""
    segments = [s for s in path.split("/") if s]
    if "show" in segments[:-1]:
        segment = segments[segments.index("show") + 1]
    else:
        segment = segments[-1] if segments else ""
    return leading_digits(segment)


def id_from_author_url(url: str) -> str:
    """Parse an author id from ".../author/show/15872.Rick_Riordan"."""
    if not url.startswith(AUTHOR_URL_PREFIX):
        raise ParseError(f"Unexpected author URL {url!r}")
    segment = url.removeprefix(AUTHOR_URL_PREFIX).split(".", 1)[0]
    return _all_digits(segment, url)


def id_from_series_url(url: str) -> str:
    """Parse a series id from ".../series/40736-percy-jackson-and-the-olympians"."""
    if not url.startswith(SERIES_URL_PREFIX):
        raise ParseError(f"Unexpected series URL {url!r}")
    segment = url.removeprefix(SERIES_URL_PREFIX).split("-", 1)[0]
    return _all_digits(segment, url)


def _all_digits(segment: str, source: str) -> str:
    if not segment.isdigit():
        raise ParseError(f"No numeric catalog identifier in {source!r}")
    return segment
