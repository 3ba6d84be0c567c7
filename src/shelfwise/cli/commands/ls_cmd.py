# ABOUTME: The `shelfwise ls` command for listing cataloged books.
# ABOUTME: Displays a Rich table of every book with its authors and series.

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfwise.cli.options import db_option
from shelfwise.db.catalog import LibraryCatalog
from shelfwise.db.connection import DEFAULT_DB_PATH, open_library
from shelfwise.db.mapping import LibraryAuthor, LibraryBook, SeriesEntry

console = Console()

Row = tuple[LibraryBook, list[LibraryAuthor], list[SeriesEntry]]


async def _load(db_path: Path) -> list[Row]:
    conn = await open_library(db_path)
    try:
        catalog = LibraryCatalog(conn)
        rows = []
        for book in await catalog.list_books():
            rows.append(
                (
                    book,
                    await catalog.authors_for_book(book.id),
                    await catalog.series_for_book(book.id),
                )
            )
        return rows
    finally:
        await conn.close()


@click.command("ls")
@db_option
def ls(db_path: Path | None) -> None:
    """List all books in the library."""
    rows = asyncio.run(_load(db_path or DEFAULT_DB_PATH))

    if not rows:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Series")
    table.add_column("Catalog ID", style="dim")

    for book, authors, series in rows:
        table.add_row(
            str(book.id),
            book.title,
            ", ".join(a.name for a in authors) or "[dim]unknown[/dim]",
            "; ".join(f"{entry.series.name} #{entry.position:g}" for entry in series),
            str(book.external_id),
        )

    console.print(table)
    console.print(f"\n[dim]{len(rows)} book(s)[/dim]")
