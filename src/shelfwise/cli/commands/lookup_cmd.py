# ABOUTME: The `shelfwise lookup` command for querying the online catalog without storing anything.
# ABOUTME: Accepts an identifier, an ISBN, or a title with optional author and prints the record.

import asyncio

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shelfwise.catalog.errors import CatalogError
from shelfwise.catalog.extractor import DocumentExtractor
from shelfwise.catalog.http import CatalogHttpClient
from shelfwise.catalog.matching import CatalogMatcher
from shelfwise.catalog.request import MetadataRequest, by_id, by_isbn, by_title
from shelfwise.catalog.types import AUTHOR_ROLE, BookMetadata

console = Console()


def _build_request(
    external_id: str | None, isbn: str | None, title: str | None, author: str | None
) -> MetadataRequest:
    chosen = [value for value in (external_id, isbn, title) if value]
    if len(chosen) != 1:
        raise click.UsageError("Give exactly one of --id, --isbn or --title.")
    if author and not title:
        raise click.UsageError("--author can only be combined with --title.")

    if external_id:
        return by_id(external_id)
    if isbn:
        return by_isbn(isbn)
    request = by_title(title or "")
    return request.with_author(author) if author else request


async def _run(request: MetadataRequest) -> BookMetadata | None:
    async with CatalogHttpClient() as http_client:
        return await request.execute(
            CatalogMatcher(http_client), DocumentExtractor(http_client)
        )


def _render(meta: BookMetadata) -> Table:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("Catalog ID", meta.external_id)
    table.add_row("Title", meta.title)
    table.add_row("Author", meta.author or "unknown")
    for contributor in meta.contributors:
        if contributor.role != AUTHOR_ROLE:
            table.add_row(contributor.role, contributor.name)
    for membership in meta.series:
        table.add_row("Series", f"{membership.title} #{membership.position:g}")
    if meta.isbn:
        table.add_row("ISBN", meta.isbn)
    if meta.publisher:
        table.add_row("Publisher", meta.publisher)
    if meta.publication_date:
        table.add_row("Published", meta.publication_date.date().isoformat())
    if meta.page_count:
        table.add_row("Pages", str(meta.page_count))
    if meta.language:
        table.add_row("Language", meta.language)
    if meta.genres:
        table.add_row("Genres", ", ".join(meta.genres))
    if meta.image_url:
        table.add_row("Cover", meta.image_url)
    return table


@click.command("lookup")
@click.option("--id", "external_id", default=None, help="Catalog record identifier.")
@click.option("--isbn", default=None, help="ISBN-10 or ISBN-13.")
@click.option("--title", default=None, help="Book title.")
@click.option("--author", default=None, help="Author name (only with --title).")
def lookup(
    external_id: str | None, isbn: str | None, title: str | None, author: str | None
) -> None:
    """Fetch a book's metadata from the online catalog."""
    try:
        request = _build_request(external_id, isbn, title, author)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        meta = asyncio.run(_run(request))
    except CatalogError as exc:
        console.print(f"[red]Lookup failed:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    if meta is None:
        console.print("[yellow]No matching book found.[/yellow]")
        raise SystemExit(1)

    console.print(_render(meta))
