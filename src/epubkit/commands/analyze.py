"""Analyze command: show how an EPUB is put together."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from epubkit.core.archive import ZipArchive
from epubkit.core.container import CONTAINER_PATH, resolve_package_path
from epubkit.core.errors import EpubError
from epubkit.core.fallback import HTML_EXTENSIONS, is_content_candidate
from epubkit.core.package import parse_package
from epubkit.models.package import PackageDocument

MANIFEST_PREVIEW = 10
SAMPLE_CHARS = 500


def display_entries(entries: list[str], console: Console) -> None:
    table = Table(title="Archive Entries", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="white")
    table.add_column("HTML", justify="center")
    table.add_column("Fallback", justify="center")

    for entry in sorted(entries):
        is_html = entry.lower().endswith(HTML_EXTENSIONS)
        table.add_row(
            escape(entry),
            "[green]yes[/]" if is_html else "",
            "[green]yes[/]" if is_content_candidate(entry) else "",
        )

    console.print(table)


def display_package(package: PackageDocument, console: Console) -> None:
    metadata = package.metadata
    console.print(
        Panel(
            "\n".join(
                [
                    f"[dim]Package document:[/] {package.path}",
                    f"[dim]Title:[/] {escape(metadata.title)}",
                    f"[dim]Author:[/] {escape(metadata.author)}",
                    f"[dim]Manifest items:[/] {len(package.manifest)}",
                    f"[dim]Spine items:[/] {len(package.spine)}",
                    f"[dim]TOC document:[/] {package.toc_path or '[yellow]not found[/]'}",
                ]
            ),
            title="Package",
            border_style="blue",
        )
    )

    spine = Table(title="Spine", show_header=True, header_style="bold cyan")
    spine.add_column("#", style="dim", width=4)
    spine.add_column("idref", style="white")
    spine.add_column("Path")
    for i, idref in enumerate(package.spine):
        path = package.spine_path(idref)
        location = escape(path) if path else "[red]missing from manifest[/]"
        spine.add_row(str(i + 1), escape(idref), location)
    console.print(spine)

    manifest = Table(
        title=f"Manifest (first {MANIFEST_PREVIEW})", show_header=True, header_style="bold cyan"
    )
    manifest.add_column("id", style="white")
    manifest.add_column("href")
    manifest.add_column("media-type", style="dim")
    for item in list(package.manifest.values())[:MANIFEST_PREVIEW]:
        manifest.add_row(escape(item.id), escape(item.href), item.media_type or "")
    console.print(manifest)


def execute_analyze(book_path: Path, show_sample: bool, console: Console) -> bool:
    """Print the structure of an EPUB. Returns False when it cannot be parsed."""
    with ZipArchive(book_path) as archive:
        entries = archive.list_entries()
        display_entries(entries, console)
        console.print()

        container_xml = archive.read_text(CONTAINER_PATH)
        if container_xml is not None:
            console.print(Panel(escape(container_xml.strip()), title=CONTAINER_PATH, border_style="dim"))

        try:
            package = parse_package(archive, resolve_package_path(archive))
        except EpubError as e:
            console.print(f"[red]{e.kind}: {e}[/]")
            return False

        display_package(package, console)

        if show_sample:
            html_entries = sorted(e for e in entries if e.lower().endswith(HTML_EXTENSIONS))
            if html_entries:
                sample = archive.read_text(html_entries[0]) or ""
                console.print(
                    Panel(
                        escape(sample[:SAMPLE_CHARS]),
                        title=f"Sample from {html_entries[0]} (first {SAMPLE_CHARS} chars)",
                        border_style="dim",
                    )
                )

    return True
