# ABOUTME: The `shelfwise add` command for filing EPUBs into the library.
# ABOUTME: Looks each file up in the online catalog and ingests the result atomically.

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from shelfwise.catalog.extractor import DocumentExtractor
from shelfwise.catalog.http import CatalogHttpClient
from shelfwise.catalog.matching import CatalogMatcher
from shelfwise.cli.options import db_option
from shelfwise.core.importer import ImportResult, import_books
from shelfwise.db.catalog import LibraryCatalog
from shelfwise.db.connection import DEFAULT_DB_PATH, open_library

console = Console()


def _collect_epubs(paths: tuple[Path, ...]) -> list[Path]:
    """Expand directories into the EPUB files they contain."""
    found: list[Path] = []
    for path in paths:
        if path.is_dir():
            found.extend(sorted(path.rglob("*.epub")))
        else:
            found.append(path)
    return found


async def _run(epub_files: list[Path], db_path: Path) -> ImportResult:
    conn = await open_library(db_path)
    try:
        catalog = LibraryCatalog(conn)
        async with CatalogHttpClient() as http_client:
            return await import_books(
                epub_files,
                resolver=CatalogMatcher(http_client),
                fetcher=DocumentExtractor(http_client),
                catalog=catalog,
                on_change=lambda: console.print("  [green]Library updated[/green]"),
            )
    finally:
        await conn.close()


@click.command("add")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@db_option
def add(paths: tuple[Path, ...], db_path: Path | None) -> None:
    """Look up EPUB files in the online catalog and add them to the library."""
    epub_files = _collect_epubs(paths)

    if not epub_files:
        console.print("[yellow]No EPUB files found.[/yellow]")
        return

    console.print(f"Adding [bold]{len(epub_files)}[/bold] EPUB file(s)\n")
    result = asyncio.run(_run(epub_files, db_path or DEFAULT_DB_PATH))

    parts = []
    if result.added:
        parts.append(f"[green]{result.added} added[/green]")
    if result.duplicates:
        parts.append(f"[yellow]{result.duplicates} already in your library[/yellow]")
    if result.not_found:
        parts.append(f"[yellow]{result.not_found} with no metadata found[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")

    console.print(", ".join(parts))

    if result.error_details:
        console.print(f"\n[yellow]{result.errors} file(s) could not be added:[/yellow]")
        for path, msg in result.error_details:
            console.print(f"  [dim]{escape(path.name)}:[/dim] {escape(msg)}")

    if result.added == 0 and (result.errors or result.not_found):
        raise SystemExit(1)
