# ABOUTME: Unit tests for the immutable metadata request builders.
# ABOUTME: Verifies each request variant dispatches to the right resolver call and fetches on a hit.

import dataclasses

import pytest

from shelfwise.catalog.request import (
    IdentifierRequest,
    IsbnRequest,
    TitleRequest,
    TitleWithAuthorRequest,
    by_id,
    by_isbn,
    by_title,
)
from shelfwise.catalog.types import BookMetadata


class FakeResolver:
    """Records calls and answers from a fixed table."""

    def __init__(
        self,
        existing: set[str] | None = None,
        isbn_ids: dict[str, str] | None = None,
        title_ids: dict[str, str] | None = None,
        title_author_ids: dict[tuple[str, str], str] | None = None,
    ) -> None:
        self._existing = existing or set()
        self._isbn_ids = isbn_ids or {}
        self._title_ids = title_ids or {}
        self._title_author_ids = title_author_ids or {}
        self.calls: list[tuple[str, ...]] = []

    async def id_exists(self, external_id: str) -> bool:
        self.calls.append(("id_exists", external_id))
        return external_id in self._existing

    async def resolve_by_isbn(self, isbn: str) -> str | None:
        self.calls.append(("isbn", isbn))
        return self._isbn_ids.get(isbn)

    async def resolve_by_title(self, title: str) -> str | None:
        self.calls.append(("title", title))
        return self._title_ids.get(title)

    async def resolve_by_title_author(self, title: str, author: str) -> str | None:
        self.calls.append(("title_author", title, author))
        return self._title_author_ids.get((title, author))


class FakeFetcher:
    """Returns a stub record for any identifier and logs what was fetched."""

    def __init__(self) -> None:
        self.fetched: list[str] = []

    async def fetch(self, external_id: str) -> BookMetadata:
        self.fetched.append(external_id)
        return BookMetadata(title="Fire", external_id=external_id)


class TestBuilders:
    """Tests for by_id(), by_isbn() and by_title()."""

    def test_by_id(self) -> None:
        """by_id() builds an IdentifierRequest."""
        assert by_id("6137154") == IdentifierRequest("6137154")

    @pytest.mark.parametrize("external_id", ["6137154-fire", "abc", "-1"])
    def test_by_id_requires_digits(self, external_id: str) -> None:
        """Identifiers with anything but digits are a ValueError."""
        with pytest.raises(ValueError, match="numeric"):
            by_id(external_id)

    def test_by_isbn_strips_separators(self) -> None:
        """Hyphens and spaces are removed from ISBNs."""
        assert by_isbn("978-0-8037 3461-6") == IsbnRequest("9780803734616")

    def test_by_title_with_author(self) -> None:
        """with_author() narrows a title request."""
        request = by_title("Fire").with_author("Kristin Cashore")
        assert request == TitleWithAuthorRequest(title="Fire", author="Kristin Cashore")

    @pytest.mark.parametrize("builder", [by_id, by_isbn, by_title])
    def test_empty_input_rejected(self, builder) -> None:
        """Blank inputs are a ValueError."""
        with pytest.raises(ValueError):
            builder("  ")

    def test_empty_author_rejected(self) -> None:
        """A blank author can't narrow a request."""
        with pytest.raises(ValueError):
            by_title("Fire").with_author("")

    def test_requests_are_immutable(self) -> None:
        """Requests can't be modified after construction."""
        request = by_title("Fire")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.title = "Graceling"  # type: ignore[misc]

    def test_with_author_leaves_original(self) -> None:
        """Narrowing returns a new request."""
        request = by_title("Fire")
        request.with_author("Kristin Cashore")
        assert request == TitleRequest("Fire")


class TestExecute:
    """Tests for execute() on each variant."""

    async def test_identifier_checks_existence(self) -> None:
        """Known identifiers are checked before fetching."""
        resolver = FakeResolver(existing={"6137154"})
        fetcher = FakeFetcher()
        meta = await by_id("6137154").execute(resolver, fetcher)
        assert meta is not None
        assert meta.external_id == "6137154"
        assert resolver.calls == [("id_exists", "6137154")]

    async def test_identifier_missing(self) -> None:
        """A nonexistent identifier is not fetched."""
        fetcher = FakeFetcher()
        assert await by_id("1").execute(FakeResolver(), fetcher) is None
        assert fetcher.fetched == []

    async def test_isbn(self) -> None:
        """ISBN requests resolve then fetch."""
        resolver = FakeResolver(isbn_ids={"9780803734616": "6137154"})
        fetcher = FakeFetcher()
        meta = await by_isbn("9780803734616").execute(resolver, fetcher)
        assert meta is not None
        assert fetcher.fetched == ["6137154"]

    async def test_title_only(self) -> None:
        """Title requests use single-field resolution."""
        resolver = FakeResolver(title_ids={"Fire": "6137154"})
        meta = await by_title("Fire").execute(resolver, FakeFetcher())
        assert meta is not None
        assert resolver.calls == [("title", "Fire")]

    async def test_title_author(self) -> None:
        """Title-with-author requests use both fields."""
        resolver = FakeResolver(title_author_ids={("Fire", "Kristin Cashore"): "6137154"})
        request = by_title("Fire").with_author("Kristin Cashore")
        meta = await request.execute(resolver, FakeFetcher())
        assert meta is not None
        assert resolver.calls == [("title_author", "Fire", "Kristin Cashore")]

    async def test_no_match_is_none(self) -> None:
        """An unresolved request returns None without fetching."""
        fetcher = FakeFetcher()
        assert await by_title("Nothing").execute(FakeResolver(), fetcher) is None
        assert fetcher.fetched == []
