# ABOUTME: Immutable metadata requests, one type per resolution strategy.
# ABOUTME: by_id / by_isbn / by_title(...).with_author(...) build a request; execute() resolves it.

from dataclasses import dataclass
from typing import Protocol

from shelfwise.catalog.types import BookMetadata


class IdentifierResolver(Protocol):
    """The matcher operations the requests depend on."""

    async def id_exists(self, external_id: str) -> bool: ...

    async def resolve_by_isbn(self, isbn: str) -> str | None: ...

    async def resolve_by_title(self, title: str) -> str | None: ...

    async def resolve_by_title_author(self, title: str, author: str) -> str | None: ...


class RecordFetcher(Protocol):
    """The extractor operation the requests depend on."""

    async def fetch(self, external_id: str) -> BookMetadata: ...


def _required(value: str, what: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{what} must not be empty")
    return cleaned


async def _fetch_if_found(
    fetcher: RecordFetcher, external_id: str | None
) -> BookMetadata | None:
    if external_id is None:
        return None
    return await fetcher.fetch(external_id)


@dataclass(frozen=True)
class IdentifierRequest:
    """Look up a book whose catalog identifier is already known."""

    external_id: str

    async def execute(
        self, resolver: IdentifierResolver, fetcher: RecordFetcher
    ) -> BookMetadata | None:
        if not await resolver.id_exists(self.external_id):
            return None
        return await fetcher.fetch(self.external_id)


@dataclass(frozen=True)
class IsbnRequest:
    """Look up a book by ISBN."""

    isbn: str

    async def execute(
        self, resolver: IdentifierResolver, fetcher: RecordFetcher
    ) -> BookMetadata | None:
        return await _fetch_if_found(fetcher, await resolver.resolve_by_isbn(self.isbn))


@dataclass(frozen=True)
class TitleWithAuthorRequest:
    """Look up a book by title, disambiguated by one author's name."""

    title: str
    author: str

    async def execute(
        self, resolver: IdentifierResolver, fetcher: RecordFetcher
    ) -> BookMetadata | None:
        external_id = await resolver.resolve_by_title_author(self.title, self.author)
        return await _fetch_if_found(fetcher, external_id)


@dataclass(frozen=True)
class TitleRequest:
    """Look up a book by title alone."""

    title: str

    def with_author(self, author: str) -> TitleWithAuthorRequest:
        """Narrow this request with an author name."""
        return TitleWithAuthorRequest(title=self.title, author=_required(author, "author"))

    async def execute(
        self, resolver: IdentifierResolver, fetcher: RecordFetcher
    ) -> BookMetadata | None:
        return await _fetch_if_found(fetcher, await resolver.resolve_by_title(self.title))


MetadataRequest = IdentifierRequest | IsbnRequest | TitleRequest | TitleWithAuthorRequest


def by_id(external_id: str) -> IdentifierRequest:
    """Start a request from a numeric catalog identifier."""
    cleaned = _required(external_id, "catalog identifier")
    if not cleaned.isdigit():
        raise ValueError(f"catalog identifier must be numeric, got {cleaned!r}")
    return IdentifierRequest(cleaned)


def by_isbn(isbn: str) -> IsbnRequest:
    """Start a request from an ISBN. Hyphens and spaces are dropped."""
    return IsbnRequest(_required(isbn.replace("-", "").replace(" ", ""), "ISBN"))


def by_title(title: str) -> TitleRequest:
    """Start a request from a title. Call with_author() to add an author."""
    return TitleRequest(_required(title, "title"))
