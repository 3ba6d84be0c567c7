# ABOUTME: CLI package for Shelfwise, built on Click.
# ABOUTME: Defines the root command group, configures logging, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from shelfwise.cli.commands import add_cmd, lookup_cmd, ls_cmd


@click.group()
@click.version_option(package_name="shelfwise")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Shelfwise - file ebooks into a library using online catalog metadata."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )
    # httpx logs every request at INFO; keep it quiet unless debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


cli.add_command(add_cmd.add)
cli.add_command(lookup_cmd.lookup)
cli.add_command(ls_cmd.ls)
