# ABOUTME: Canned catalog page fixtures for testing: search results and record pages.
# ABOUTME: Record pages embed a __NEXT_DATA__ payload with a realistic apolloState object cache.

import copy
import json
from typing import Any

FIRE_ID = "6137154"
CASHORE_ID = "2782853"
SCHOENHERR_ID = "205416"
GRACELING_SERIES_ID = "57645"

BOOK_KEY = "Book:kca://book/amzn1.gr.book.v1.vMfAJw0qqHm8PDsgLHxdPA"
CASHORE_KEY = "Contributor:kca://author/amzn1.gr.author.v1.ZrmEOi9AmKPJdEOvWDRvkQ"
SCHOENHERR_KEY = "Contributor:kca://author/amzn1.gr.author.v1.Ln1f3rYjVvQ2L1bdpdoJfA"
SERIES_KEY = "Series:kca://series/amzn1.gr.series.v1.AqQUkkhMPmnbxIhfpo6gbg"

_FIRE_STATE: dict[str, Any] = {
    "ROOT_QUERY": {
        "__typename": "Query",
        f'getBookByLegacyId({{"legacyId":"{FIRE_ID}"}})': {"__ref": BOOK_KEY},
    },
    BOOK_KEY: {
        "__typename": "Book",
        "id": "kca://book/amzn1.gr.book.v1.vMfAJw0qqHm8PDsgLHxdPA",
        "legacyId": 6137154,
        "title": "Fire",
        "titleComplete": "Fire (Graceling Realm, #2)",
        "imageUrl": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/6137154.jpg",
        "webUrl": f"https://www.goodreads.com/book/show/{FIRE_ID}-fire",
        "primaryContributorEdge": {
            "__typename": "BookContributorEdge",
            "node": {"__ref": CASHORE_KEY},
            "role": "Author",
        },
        "secondaryContributorEdges": [
            {
                "__typename": "BookContributorEdge",
                "node": {"__ref": SCHOENHERR_KEY},
                "role": "Illustrator",
            }
        ],
        "bookSeries": [
            {
                "__typename": "BookSeries",
                "userPosition": "2",
                "series": {"__ref": SERIES_KEY},
            }
        ],
        "bookGenres": [
            {"__typename": "BookGenre", "genre": {"__typename": "Genre", "name": "Fantasy"}},
            {
                "__typename": "BookGenre",
                "genre": {"__typename": "Genre", "name": "  Young   Adult "},
            },
        ],
        "details": {
            "__typename": "BookDetails",
            "asin": "B002PXVYGO",
            "format": "Hardcover",
            "numPages": 461,
            "publicationTime": 1254207600000,
            "publisher": "Dial Books",
            "isbn": "0803734611",
            "isbn13": "9780803734616",
            "language": {"__typename": "Language", "name": "English"},
        },
    },
    CASHORE_KEY: {
        "__typename": "Contributor",
        "legacyId": 2782853,
        "name": "Kristin Cashore",
        "webUrl": f"https://www.goodreads.com/author/show/{CASHORE_ID}.Kristin_Cashore",
    },
    SCHOENHERR_KEY: {
        "__typename": "Contributor",
        "legacyId": 205416,
        "name": "Ian Schoenherr",
        "webUrl": f"https://www.goodreads.com/author/show/{SCHOENHERR_ID}.Ian_Schoenherr",
    },
    SERIES_KEY: {
        "__typename": "Series",
        "id": "kca://series/amzn1.gr.series.v1.AqQUkkhMPmnbxIhfpo6gbg",
        "title": "Graceling Realm",
        "webUrl": f"https://www.goodreads.com/series/{GRACELING_SERIES_ID}-graceling-realm",
    },
}



def fire_state() -> dict[str, Any]:
    """A fresh, mutable copy of the apolloState cache for "Fire"."""
    return copy.deepcopy(_FIRE_STATE)


def page_data(state: dict[str, Any], book_id: str = f"{FIRE_ID}-fire") -> dict[str, Any]:
    """Wrap an apolloState cache in the page's __NEXT_DATA__ envelope."""
    return {
        "props": {
            "pageProps": {
                "apolloState": state,
                "params": {"book_id": book_id},
            },
            "__N_SSP": True,
        },
        "page": "/book/show/[book_id]",
        "query": {"book_id": book_id},
    }


def next_data_page(data: Any) -> str:
    """Render a minimal record page around a __NEXT_DATA__ payload."""
    return (
        "<!DOCTYPE html><html><head><title>Fire by Kristin Cashore</title>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(data)}</script>'
        "</head><body><div id=\"__next\"></div></body></html>"
    )


def fire_record_page() -> str:
    """The record page for "Fire", as served at /book/show/6137154."""
    return next_data_page(page_data(fire_state()))


PAGE_WITHOUT_NEXT_DATA = "<html><head><title>Goodreads</title></head><body></body></html>"


def search_page(rows: list[tuple[str, str, str]]) -> str:
    """Render a search results page from (title, author, href) rows."""
    body = "".join(
        '<tr itemscope itemtype="http://schema.org/Book"><td width="100%" valign="top">'
        f'<a class="bookTitle" itemprop="url" href="{href}">'
        f'<span itemprop="name" role="heading" aria-level="4">{title}</span></a><br/>'
        '<span class="by">by</span> <span itemprop="author" itemscope="">'
        '<div class="authorName__container">'
        f'<a class="authorName" itemprop="url" href="https://www.goodreads.com/author/show/1.X">'
        f'<span itemprop="name">{author}</span></a></div></span></td></tr>'
        for title, author, href in rows
    )
    return f'<html><body><table class="tableList">{body}</table></body></html>'


FIRE_AND_BLOOD_ROW = (
    "Fire &amp; Blood (A Targaryen History, #1)",
    "George R.R. Martin",
    "/book/show/39943621-fire-blood?from_search=true&amp;from_srp=true&amp;rank=1",
)
FIRE_ROW = (
    "Fire (Graceling Realm, #2)",
    "Kristin Cashore",
    f"/book/show/{FIRE_ID}-fire?from_search=true&amp;from_srp=true&amp;rank=2",
)

SEARCH_FIRE = search_page([FIRE_AND_BLOOD_ROW, FIRE_ROW])
SEARCH_EMPTY = search_page([])
