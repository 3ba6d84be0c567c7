# ABOUTME: Catalog package: resolving loosely-identified books against the online catalog.
# ABOUTME: Exports the metadata types, matching client, extractor, and request builders.

from shelfwise.catalog.errors import CatalogError, FetchError, ParseError, ScrapeError
from shelfwise.catalog.extractor import DocumentExtractor
from shelfwise.catalog.http import CatalogHttpClient, HttpClient
from shelfwise.catalog.matching import CatalogMatcher, fuzzy_equals
from shelfwise.catalog.request import MetadataRequest, by_id, by_isbn, by_title
from shelfwise.catalog.sorting import name_sort_key, title_sort_key
from shelfwise.catalog.types import BookMetadata, Contributor, SeriesMembership

__all__ = [
    "BookMetadata",
    "CatalogError",
    "CatalogHttpClient",
    "CatalogMatcher",
    "Contributor",
    "DocumentExtractor",
    "FetchError",
    "HttpClient",
    "MetadataRequest",
    "ParseError",
    "ScrapeError",
    "SeriesMembership",
    "by_id",
    "by_isbn",
    "by_title",
    "fuzzy_equals",
    "name_sort_key",
    "title_sort_key",
]
