"""
Tests for the full parsing pipeline.
"""

import threading

import pytest

from epub_factory import DictArchive, build_epub, build_files, long_chapter, xhtml
from epubkit import (
    EpubParser,
    InvalidArchiveError,
    MissingContainerError,
    NoReadableContentError,
    ParseCancelledError,
    ParseMode,
    ParserConfig,
    extract_text,
    parse_epub,
)
from epubkit.core.text import PAGE_BREAK_MARKER
from epubkit.models.book import UNKNOWN_AUTHOR
from epubkit.models.progress import ParseStage


def _numbered_chapters(count: int, long: bool = False):
    chapters = []
    for i in range(1, count + 1):
        markup = long_chapter(f"Chapter {i}") if long else xhtml(f"<h1>Chapter {i}</h1><p>Text {i}</p>")
        chapters.append((f"ch{i:02d}.xhtml", markup))
    return chapters


class TestStructuredParse:
    """Tests for structured mode."""

    def test_basic_book(self, simple_book):
        book = parse_epub(simple_book)
        assert book.metadata.title == "Test Book"
        assert book.metadata.author == "Test Author"
        assert [chapter.title for chapter in book.chapters] == [
            "Chapter One",
            "Chapter Two",
            "Chapter Three",
        ]
        assert [chapter.id for chapter in book.chapters] == ["ch1", "ch2", "ch3"]
        assert book.chapters[0].href == "OEBPS/chapter1.xhtml"
        assert [entry.title for entry in book.toc] == ["Chapter 1", "Chapter 2", "Chapter 3"]
        assert book.spine_order == ["ch1", "ch2", "ch3"]
        assert book.text is None
        assert not book.truncated
        assert not book.used_fallback
        assert book.warnings == []

    def test_nav_toc(self):
        data = build_epub([("a.xhtml", xhtml("<p>A</p>")), ("b.xhtml", xhtml("<p>B</p>"))], toc="nav")
        book = parse_epub(data)
        assert [(entry.title, entry.href) for entry in book.toc] == [
            ("Chapter 1", "a.xhtml"),
            ("Chapter 2", "b.xhtml"),
        ]

    def test_missing_toc_is_not_fatal(self):
        book = parse_epub(build_epub([("a.xhtml", xhtml("<p>A</p>"))], toc=None))
        assert book.toc == []
        assert len(book.chapters) == 1

    def test_path_input(self, book_file):
        assert len(parse_epub(book_file).chapters) == 3
        assert len(parse_epub(str(book_file)).chapters) == 3

    def test_archive_reader_input(self):
        files = build_files([("a.xhtml", xhtml("<h1>Only</h1><p>Body</p>"))])
        book = EpubParser(DictArchive(files)).parse()
        assert book.chapters[0].title == "Only"

    def test_package_at_archive_root(self):
        book = parse_epub(build_epub([("a.xhtml", xhtml("<p>Root</p>"))], opf_dir=""))
        assert book.chapters[0].href == "a.xhtml"

    def test_missing_metadata_defaults(self):
        book = parse_epub(build_epub([("a.xhtml", xhtml("<p>A</p>"))], authors=()))
        assert book.metadata.author == UNKNOWN_AUTHOR

    def test_unknown_spine_id_skipped(self):
        data = build_epub(
            [("a.xhtml", xhtml("<p>A</p>")), ("b.xhtml", xhtml("<p>B</p>"))],
            spine=["ch1", "ghost", "ch2"],
        )
        book = parse_epub(data)
        assert [chapter.id for chapter in book.chapters] == ["ch1", "ch2"]
        assert book.spine_order == ["ch1", "ghost", "ch2"]

    def test_missing_spine_document_skipped(self):
        files = build_files([("a.xhtml", xhtml("<p>A</p>")), ("b.xhtml", xhtml("<p>B</p>"))])
        del files["OEBPS/b.xhtml"]
        book = EpubParser(DictArchive(files)).parse()
        assert [chapter.id for chapter in book.chapters] == ["ch1"]

    def test_spine_order_followed(self):
        data = build_epub(
            [("a.xhtml", xhtml("<p>A</p>")), ("b.xhtml", xhtml("<p>B</p>"))],
            spine=["ch2", "ch1"],
        )
        assert [chapter.id for chapter in parse_epub(data).chapters] == ["ch2", "ch1"]

    def test_footnotes_last_write_wins(self):
        data = build_epub(
            [
                ("a.xhtml", xhtml('<p>A</p><aside epub:type="footnote" id="fn1">First</aside>')),
                ("b.xhtml", xhtml('<p>B</p><aside epub:type="footnote" id="fn1">Second</aside>')),
            ]
        )
        assert parse_epub(data).footnotes == {"fn1": "Second"}


class TestSpineCap:
    """Tests for the spine processing limits."""

    def test_default_structured_cap(self):
        book = parse_epub(build_epub(_numbered_chapters(30)))
        assert len(book.chapters) == 25
        assert book.truncated
        assert book.warnings == ["Only the first 25 of 30 spine items were processed"]
        assert len(book.spine_order) == 30

    def test_default_text_cap(self):
        book = extract_text(build_epub(_numbered_chapters(22, long=True)))
        assert len(book.chapters) == 20
        assert book.truncated

    def test_configured_cap(self):
        book = parse_epub(build_epub(_numbered_chapters(5)), ParserConfig(max_spine_items=2))
        assert [chapter.id for chapter in book.chapters] == ["ch1", "ch2"]

    def test_exact_cap_not_truncated(self):
        book = parse_epub(build_epub(_numbered_chapters(3)), ParserConfig(max_spine_items=3))
        assert not book.truncated
        assert book.warnings == []


class TestFallback:
    """Tests for scanning the archive when the spine gives nothing."""

    def test_empty_spine_scans_archive(self):
        data = build_epub(
            [("b.xhtml", xhtml("<h1>Bee</h1>")), ("a.xhtml", xhtml("<h1>Ay</h1>"))],
            spine=[],
            extra_files={"OEBPS/cover.xhtml": xhtml("<h1>Cover</h1>")},
        )
        book = parse_epub(data)
        assert book.used_fallback
        # Sorted by path; manifest ids reused; cover skipped
        assert [chapter.id for chapter in book.chapters] == ["ch2", "ch1"]
        assert [chapter.title for chapter in book.chapters] == ["Ay", "Bee"]

    def test_empty_spine_documents_trigger_scan(self):
        data = build_epub(
            [("a.xhtml", xhtml("<div> </div>"))],
            extra_files={"OEBPS/extra/story.html": xhtml("<p>Found it</p>")},
        )
        book = parse_epub(data)
        assert book.used_fallback
        assert any(chapter.href == "OEBPS/extra/story.html" for chapter in book.chapters)

    def test_fallback_file_limit(self):
        extra = {f"OEBPS/loose/{i:02d}.html": xhtml(f"<p>Loose {i}</p>") for i in range(5)}
        data = build_epub([], extra_files=extra)
        book = parse_epub(data, ParserConfig(max_fallback_files=3))
        assert [chapter.id for chapter in book.chapters] == [
            "OEBPS/loose/00.html",
            "OEBPS/loose/01.html",
            "OEBPS/loose/02.html",
        ]
        assert book.truncated
        assert "Only the first 3 of 5 HTML files were scanned" in book.warnings

    def test_no_readable_content(self):
        data = build_epub([("a.xhtml", xhtml("<p> </p>")), ("b.xhtml", xhtml(""))])
        with pytest.raises(NoReadableContentError) as exc_info:
            parse_epub(data)
        message = str(exc_info.value)
        assert message.startswith("No readable text content found in EPUB file")
        assert "OEBPS/a.xhtml" in message
        assert exc_info.value.kind == "no-readable-content"

    def test_error_listing_limited(self):
        data = build_epub([("a.xhtml", xhtml(""))])
        with pytest.raises(NoReadableContentError) as exc_info:
            parse_epub(data, ParserConfig(error_listing_limit=2))
        assert len(exc_info.value.entries) == 2
        assert str(exc_info.value).endswith("...")


class TestTextMode:
    """Tests for the flattened text view."""

    def test_text_view(self, long_book):
        book = extract_text(long_book)
        assert book.text is not None
        assert book.text.startswith("# Chapter One")
        assert "# Chapter Two" in book.text
        assert "<" not in book.text
        assert len(book.chapters) == 3
        assert not book.used_fallback

    def test_mode_from_config(self, long_book):
        book = parse_epub(long_book, ParserConfig(mode=ParseMode.TEXT))
        assert book.text is not None

    def test_page_breaks(self):
        body = long_chapter("One").replace(
            "</h1>", '</h1><div class="page-break"></div>'
        )
        book = extract_text(build_epub([("a.xhtml", body)]))
        assert len(book.page_breaks) == 1
        offset = book.page_breaks[0]
        assert book.text[offset : offset + len(PAGE_BREAK_MARKER)] == PAGE_BREAK_MARKER

    def test_truncation_notice_appended(self):
        book = extract_text(
            build_epub(_numbered_chapters(3, long=True)), ParserConfig(max_spine_items=2)
        )
        assert book.text.endswith(
            "[Content truncated - showing first 2 chapters of 3 total chapters "
            "to improve performance]"
        )

    def test_short_text_triggers_scan(self):
        """Test a spine with too little text falls back to scanning HTML files."""
        data = build_epub(
            [("a.xhtml", xhtml("<p>Short spine text</p>"))],
            extra_files={"OEBPS/appendix.html": long_chapter("Appendix")},
        )
        book = extract_text(data)
        assert book.used_fallback
        assert "# Appendix" in book.text

    def test_tiny_documents_dropped_from_text(self):
        data = build_epub(
            [("a.xhtml", long_chapter("Main")), ("b.xhtml", xhtml("<p>tiny</p>"))]
        )
        book = extract_text(data)
        assert "tiny" not in book.text
        assert len(book.chapters) == 2


class TestFatalErrors:
    """Tests for errors that abort a parse."""

    def test_not_a_zip(self):
        with pytest.raises(InvalidArchiveError):
            parse_epub(b"definitely not a zip")

    def test_missing_container(self):
        files = build_files([("a.xhtml", xhtml("<p>A</p>"))])
        del files["META-INF/container.xml"]
        with pytest.raises(MissingContainerError):
            EpubParser(DictArchive(files)).parse()


class TestProgress:
    """Tests for progress events and cancellation."""

    def test_event_sequence(self, simple_book):
        events = []
        parse_epub(simple_book, progress=events.append)
        stages = [event.stage for event in events]
        assert stages[:4] == [
            ParseStage.LOADING,
            ParseStage.EXTRACTING_STRUCTURE,
            ParseStage.PARSING_TOC,
            ParseStage.PARSING_CONTENT,
        ]
        assert stages[-1] == ParseStage.COMPLETE
        assert events[-1].percent == 100
        assert stages.count(ParseStage.PROCESSING_FORMATTING) == 3
        percents = [event.percent for event in events]
        assert percents == sorted(percents)

    def test_item_counts(self, simple_book):
        events = []
        parse_epub(simple_book, progress=events.append)
        formatting = [e for e in events if e.stage == ParseStage.PROCESSING_FORMATTING]
        assert [(e.items_processed, e.total_items) for e in formatting] == [(1, 3), (2, 3), (3, 3)]
        assert formatting[-1].percent == 90

    def test_error_event(self):
        events = []
        with pytest.raises(InvalidArchiveError):
            parse_epub(b"junk", progress=events.append)
        assert events[-1].stage == ParseStage.ERROR

    def test_failing_listener_ignored(self, simple_book):
        def listener(event):
            raise RuntimeError("listener broke")

        assert len(parse_epub(simple_book, progress=listener).chapters) == 3

    def test_cancel_before_start(self, simple_book):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ParseCancelledError):
            parse_epub(simple_book, cancel=cancel)

    def test_cancel_between_items(self, simple_book):
        cancel = threading.Event()
        seen = []

        def listener(event):
            if event.stage == ParseStage.PROCESSING_FORMATTING:
                seen.append(event.items_processed)
                cancel.set()

        with pytest.raises(ParseCancelledError):
            parse_epub(simple_book, progress=listener, cancel=cancel)
        assert seen == [1]
