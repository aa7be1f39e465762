"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from epubkit.commands.analyze import execute_analyze
from epubkit.commands.parse import execute_parse
from epubkit.core.errors import EpubError

app = typer.Typer(
    name="epubkit",
    help="Parse EPUB files into chapters, a table of contents and footnotes.",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show parser log messages"),
    ] = False,
) -> None:
    """Parse EPUB files into chapters, a table of contents and footnotes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def parse(
    book_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    text: Annotated[
        bool,
        typer.Option(
            "--text",
            "-t",
            help="Also build the flattened text view (writes book.txt)",
        ),
    ] = False,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-o",
            help="Output directory (default: {book_name}_parsed/)",
        ),
    ] = None,
    write: Annotated[
        bool,
        typer.Option(
            "--write",
            "-w",
            help="Write chapters and manifest to the default output directory",
        ),
    ] = False,
    max_chapters: Annotated[
        Optional[int],
        typer.Option(
            "--max-chapters",
            help="Spine items to process (default: 25, or 20 with --text)",
            min=1,
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
) -> None:
    """Parse an EPUB file and show or write its structure."""
    try:
        execute_parse(
            book_path=book_path,
            text_mode=text,
            output_dir=output_dir,
            write=write,
            max_chapters=max_chapters,
            quiet=quiet,
            console=console,
        )
    except EpubError as e:
        console.print(f"[red]Error ({e.kind}): {e}[/]")
        raise typer.Exit(1)


@app.command()
def analyze(
    book_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    sample: Annotated[
        bool,
        typer.Option("--sample", help="Print the start of the first HTML document"),
    ] = False,
) -> None:
    """Show archive entries, package document, spine and manifest."""
    try:
        ok = execute_analyze(book_path, show_sample=sample, console=console)
    except EpubError as e:
        console.print(f"[red]Error ({e.kind}): {e}[/]")
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
