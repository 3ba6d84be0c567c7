# ABOUTME: Exception hierarchy for talking to the online book catalog.
# ABOUTME: Separates transport failures, malformed pages, and pages missing expected content.


class CatalogError(Exception):
    """Base class for all catalog access failures."""


class FetchError(CatalogError):
    """Raised when an HTTP request to the catalog fails or returns a non-2xx status."""


class ParseError(CatalogError):
    """Raised when a page, selector, or embedded JSON document is malformed."""


class ScrapeError(CatalogError):
    """Raised when a page parses but lacks a structural element we require.

    Usually means the catalog changed its page layout.
    """
