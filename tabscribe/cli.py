"""tabscribe CLI entry point."""

import logging
import sys
from pathlib import Path

import click

from tabscribe import __version__
from tabscribe.config import EditorConfig
from tabscribe.logger import setup_logger
from tabscribe.persistence import (
    document_to_payload,
    load_payload_file,
    payload_to_state,
    save_payload_file,
)
from tabscribe.tab_exporter import TabExporter
from tabscribe.tab_models import TabDocument
from tabscribe.techniques import TECHNIQUES


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="tabscribe")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """tabscribe — guitar tablature editor core and text exporter."""
    setup_logger(logging.DEBUG if verbose else logging.WARNING)


# ── new subcommand ─────────────────────────────────────────────────────────────

@main.command()
@click.argument("output", type=click.Path(dir_okay=False, writable=True))
@click.option(
    "--length",
    type=click.IntRange(0),
    default=EditorConfig.default_length,
    show_default=True,
    help="Number of positions in the new tab.",
)
def new(output: str, length: int) -> None:
    """
    Write an empty tab document to OUTPUT as JSON.

    \b
    Examples:
      tabscribe new riff.json
      tabscribe new solo.json --length 64
    """
    payload = document_to_payload(TabDocument.empty(length))
    try:
        save_payload_file(payload, output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write document — {exc}", err=True)
        sys.exit(1)

    click.echo(f"Created '{output}' with {length} positions.")


# ── export subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file. Prints to stdout when omitted.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "markdown"], case_sensitive=False),
    default="text",
    show_default=True,
    help="Export format: plain monospace tab or Markdown with a fenced tab block.",
)
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Title for Markdown output. Defaults to the document filename stem.",
)
@click.option(
    "--gap",
    type=click.IntRange(0, 8),
    default=EditorConfig.column_gap,
    show_default=True,
    help="Fill characters between columns.",
)
def export(
    document: str,
    output: str | None,
    output_format: str,
    title: str | None,
    gap: int,
) -> None:
    """
    Render a saved tab DOCUMENT (JSON) as a text tab.

    Malformed cells are replaced by empty ones rather than failing the export.

    \b
    Examples:
      tabscribe export riff.json
      tabscribe export riff.json -o riff.txt
      tabscribe export riff.json --format markdown --title "Main Riff" -o riff.md
    """
    doc_path = Path(document)
    resolved_title = title if title is not None else doc_path.stem.replace("_", " ")

    try:
        state = payload_to_state(load_payload_file(document))
    except (ValueError, OSError) as exc:
        click.echo(f"  ERROR: Could not read document — {exc}", err=True)
        sys.exit(1)

    exporter = TabExporter(title=resolved_title, output_format=output_format, column_gap=gap)
    if output is None:
        click.echo(exporter.render(state.document), nl=False)
        return

    try:
        exporter.export(state.document, output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)

    click.echo(f"Done!  Wrote '{output}'.")


# ── techniques subcommand ──────────────────────────────────────────────────────

@main.command()
def techniques() -> None:
    """
    List the playing techniques, their notation symbols and stored names.

    \b
    Example:
      tabscribe techniques
    """
    for code, spec in TECHNIQUES.items():
        symbol = spec.symbol or "-"
        notes = "two notes" if spec.arity == 2 else "one note"
        click.echo(f"  {symbol:<3} {spec.label:<11} {code.value:<10} ({notes})")
