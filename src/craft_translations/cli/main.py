"""Main CLI application - extract, update, convert and merge catalogs.

This is the entry point for the craft-translations command.
"""

import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.markup import escape

from craft_translations import __version__, operations
from craft_translations.catalog.formats import FORMATS
from craft_translations.cli.common import (
    CORAL,
    NEON_CYAN,
    console,
    create_table,
    error,
    info,
    spinner,
    success,
    warn,
)
from craft_translations.config import settings
from craft_translations.errors import CraftTranslationsError
from craft_translations.operations import OperationResult

app = typer.Typer(
    name="craft-translations",
    help="Extract translatable messages from Craft CMS projects",
    add_completion=False,
    no_args_is_help=True,
)


def _handle_error(e: CraftTranslationsError) -> NoReturn:
    """Print a fatal error and exit with code 1."""
    error(escape(e.message))
    raise typer.Exit(1)


def _report(result: OperationResult, title: str) -> None:
    """Print file failures and a summary table for an operation."""
    for failure in result.failures:
        warn(escape(f"{failure.path}: {failure.error}"))

    table = create_table(title, "Metric", "Value")
    table.add_row("Messages", str(result.messages))
    table.add_row("Translated", str(sum(1 for t in result.catalog if t.is_translated())))
    if result.failures:
        table.add_row("Failed files", f"[{CORAL}]{len(result.failures)}[/{CORAL}]")
    if result.output:
        table.add_row("Output", result.output)
    console.print(table)


# ============================================================================
# Global callback
# ============================================================================


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"craft-translations [{NEON_CYAN}]{__version__}[/{NEON_CYAN}]")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log every scanned file")
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = None,
) -> None:
    """Craft Translations - gettext catalogs from Craft CMS sources."""
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(logging.DEBUG if verbose else settings.log_level)


# ============================================================================
# Commands
# ============================================================================


@app.command()
def extract(
    source: Annotated[Path, typer.Argument(help="Folder or file to scan")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Catalog to write (.pot, .po, .mo, .php, .csv)"),
    ] = None,
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Only extract this category")
    ] = None,
) -> None:
    """Extract all translatable messages into a new catalog."""
    try:
        with spinner() as progress:
            progress.add_task(f"Scanning {source}...", total=None)
            result = operations.extract(source, output, category)
    except CraftTranslationsError as e:
        _handle_error(e)

    _report(result, "Extraction")
    success(f"Wrote {result.messages} messages to {result.output}")


@app.command()
def update(
    catalog_file: Annotated[Path, typer.Argument(help="Existing catalog to update in place")],
    source: Annotated[Path, typer.Argument(help="Folder or file to scan")],
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Only extract this category")
    ] = None,
) -> None:
    """Update a catalog with the current messages, keeping translations."""
    if not catalog_file.is_file():
        error(f"{catalog_file} doesn't exist")
        info("Create it first with: craft-translations extract")
        raise typer.Exit(1)

    try:
        with spinner() as progress:
            progress.add_task(f"Scanning {source}...", total=None)
            result = operations.update(catalog_file, source, category)
    except CraftTranslationsError as e:
        _handle_error(e)

    _report(result, "Update")
    success(f"Updated {result.output}")


@app.command()
def convert(
    input_file: Annotated[Path, typer.Argument(help="Catalog to read")],
    output_file: Annotated[Path, typer.Argument(help="Catalog to write")],
) -> None:
    """Convert a catalog to the format of the output file."""
    try:
        result = operations.convert(input_file, output_file)
    except CraftTranslationsError as e:
        _handle_error(e)

    success(f"Converted {result.messages} messages to {result.output}")


@app.command()
def merge(
    input_files: Annotated[list[Path], typer.Argument(help="Catalogs to merge")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Catalog to write (default: stdout)")
    ] = None,
    fmt: Annotated[
        str, typer.Option("--format", "-f", help=f"Output format: {', '.join(FORMATS)}")
    ] = "po",
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Domain of the merged catalog")
    ] = None,
) -> None:
    """Merge several catalogs into one."""
    try:
        result = operations.merge(input_files, output, fmt, category)
    except CraftTranslationsError as e:
        _handle_error(e)

    if result.content is not None:
        # Raw catalog on stdout, no Rich formatting
        typer.echo(result.content, nl=False)
        return
    success(f"Merged {result.messages} messages into {result.output}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
