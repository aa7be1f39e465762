"""Write a parsed book to an output directory."""

from pathlib import Path

from epubkit.core.content import flatten_elements
from epubkit.models.book import Chapter, ParsedBook
from epubkit.models.output import BookOutput, ChapterSummary


class OutputWriter:
    """Write chapters, flattened text and a manifest as files."""

    def __init__(self, output_dir: Path, source_path: Path):
        """Initialize output writer.

        Args:
            output_dir: Directory to write output files
            source_path: Path to the source EPUB
        """
        self.output_dir = output_dir
        self.source_path = source_path
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_chapter(self, chapter: Chapter, index: int) -> tuple[Path, ChapterSummary]:
        """Write single chapter to JSON file."""
        filename = f"chapter_{index + 1:03d}.json"
        filepath = self.output_dir / filename
        filepath.write_text(chapter.model_dump_json(indent=2), encoding="utf-8")

        summary = ChapterSummary(
            chapter_id=chapter.id,
            chapter_index=index,
            title=chapter.title,
            source_file=chapter.href,
            output_file=filename,
            element_count=len(chapter.content),
            word_count=len(flatten_elements(chapter.content).split()),
        )
        return filepath, summary

    def write_text(self, text: str) -> Path:
        """Write the flattened text view."""
        filepath = self.output_dir / "book.txt"
        filepath.write_text(text, encoding="utf-8")
        return filepath

    def write_manifest(
        self,
        parsed_book: ParsedBook,
        chapters: list[ChapterSummary],
        text_file: Path | None = None,
    ) -> Path:
        """Write book manifest file."""
        manifest = BookOutput(
            source_path=str(self.source_path),
            metadata=parsed_book.metadata,
            toc=parsed_book.toc,
            footnotes=parsed_book.footnotes,
            page_breaks=parsed_book.page_breaks,
            chapters=chapters,
            text_file=text_file.name if text_file else None,
            truncated=parsed_book.truncated,
            used_fallback=parsed_book.used_fallback,
            warnings=parsed_book.warnings,
        )

        filepath = self.output_dir / "manifest.json"
        filepath.write_text(manifest.model_dump_json(indent=2), encoding="utf-8")
        return filepath
