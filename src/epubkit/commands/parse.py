"""Parse command implementation."""

import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from epubkit.core.content import flatten_elements
from epubkit.core.epub_parser import EpubParser
from epubkit.core.output_writer import OutputWriter
from epubkit.models.book import ParsedBook, TOCEntry
from epubkit.models.config import ParseMode, ParserConfig
from epubkit.models.progress import ParseProgress


def get_default_output_dir(book_path: Path) -> Path:
    """Get default output directory based on book filename."""
    stem = book_path.stem
    # Clean up the filename for directory name
    clean_stem = re.sub(r"[^\w\s-]", "", stem).strip()
    clean_stem = re.sub(r"[-\s]+", "_", clean_stem)
    return book_path.parent / f"{clean_stem}_parsed"


def display_toc(toc: list[TOCEntry], console: Console) -> None:
    """Display table of contents."""
    table = Table(title="Table of Contents", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("Href", style="dim")

    for i, entry in enumerate(toc):
        table.add_row(str(i + 1), escape(entry.title), escape(entry.href))

    console.print(table)


def display_chapters(parsed: ParsedBook, console: Console) -> None:
    """Display extracted chapters with their size."""
    table = Table(title="Chapters", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("Elements", justify="right", style="green")
    table.add_column("Words", justify="right", style="green")

    for i, chapter in enumerate(parsed.chapters):
        words = len(flatten_elements(chapter.content).split())
        table.add_row(str(i + 1), escape(chapter.title), str(len(chapter.content)), f"{words:,}")

    console.print(table)


def display_book_info(parsed: ParsedBook, console: Console) -> None:
    metadata = parsed.metadata
    info_lines = [
        f"[bold]{escape(metadata.title)}[/]",
        f"[dim]Author(s):[/] {escape(', '.join(metadata.authors) or metadata.author)}",
        f"[dim]Chapters:[/] {len(parsed.chapters)}",
        f"[dim]TOC entries:[/] {len(parsed.toc)}",
        f"[dim]Footnotes:[/] {len(parsed.footnotes)}",
    ]
    if metadata.language:
        info_lines.append(f"[dim]Language:[/] {metadata.language}")
    if metadata.publisher:
        info_lines.append(f"[dim]Publisher:[/] {metadata.publisher}")
    if parsed.used_fallback:
        info_lines.append("[dim]Content source:[/] archive scan (spine was empty or too thin)")

    # Show warnings if any
    if parsed.warnings:
        info_lines.append("")
        for warning in parsed.warnings:
            info_lines.append(f"[yellow]! {escape(warning)}[/]")

    console.print(Panel("\n".join(info_lines), title="Book Info", border_style="green"))


def parse_with_progress(
    book_path: Path,
    config: ParserConfig,
    console: Console,
    quiet: bool,
) -> ParsedBook:
    """Parse the book, driving a progress bar from parser events."""
    if quiet:
        return EpubParser(book_path, config=config).parse()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        task = progress.add_task("Parsing EPUB...", total=100)

        def on_progress(event: ParseProgress) -> None:
            progress.update(task, completed=event.percent, description=event.message)

        return EpubParser(book_path, config=config, progress=on_progress).parse()


def execute_parse(
    book_path: Path,
    text_mode: bool,
    output_dir: Path | None,
    write: bool,
    max_chapters: int | None,
    quiet: bool,
    console: Console,
) -> ParsedBook:
    """Execute the parse command."""
    config = ParserConfig(
        mode=ParseMode.TEXT if text_mode else ParseMode.STRUCTURED,
        max_spine_items=max_chapters,
    )
    parsed = parse_with_progress(book_path, config, console, quiet)

    if not quiet:
        console.print()
        display_book_info(parsed, console)
        console.print()
        if parsed.toc:
            display_toc(parsed.toc, console)
        display_chapters(parsed, console)

    if not write and output_dir is None:
        return parsed

    final_output_dir = output_dir or get_default_output_dir(book_path)
    writer = OutputWriter(final_output_dir, book_path)

    summaries = []
    for index, chapter in enumerate(parsed.chapters):
        _, summary = writer.write_chapter(chapter, index)
        summaries.append(summary)

    text_file = writer.write_text(parsed.text) if parsed.text is not None else None
    manifest_path = writer.write_manifest(parsed, summaries, text_file)

    if not quiet:
        console.print()
        summary_lines = [
            f"[green]Wrote {len(summaries)} chapter(s)[/]",
            "",
            f"[dim]Output directory:[/] {final_output_dir}",
            f"[dim]Manifest:[/] {manifest_path.name}",
        ]
        if text_file is not None:
            summary_lines.append(f"[dim]Text:[/] {text_file.name}")
        console.print(Panel("\n".join(summary_lines), title="Complete", border_style="green"))

    return parsed
