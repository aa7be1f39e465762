"""EPUB parsing pipeline: container, package, TOC, content, fallback."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from epubkit.core.archive import ArchiveReader, ZipArchive
from epubkit.core.container import resolve_package_path
from epubkit.core.content import ContentExtractor, ExtractedDocument, spine_documents
from epubkit.core.errors import EpubError, NoReadableContentError, ParseCancelledError
from epubkit.core.fallback import fallback_chapter_id, find_content_documents
from epubkit.core.package import parse_package
from epubkit.core.progress import CancelToken, ProgressReporter, ProgressSink
from epubkit.core.text import find_page_breaks, html_to_text
from epubkit.core.toc import parse_toc
from epubkit.models.book import Chapter, ParsedBook
from epubkit.models.config import ParseMode, ParserConfig
from epubkit.models.package import PackageDocument
from epubkit.models.progress import ParseStage

log = logging.getLogger(__name__)

EpubSource = bytes | Path | str | ArchiveReader


@dataclass
class _Extraction:
    """Results gathered over one pass of documents, in processing order."""

    chapters: list[Chapter] = field(default_factory=list)
    footnotes: dict[str, str] = field(default_factory=dict)
    texts: list[str] = field(default_factory=list)

    def add(self, document: ExtractedDocument, text: str | None) -> None:
        self.chapters.append(document.chapter)
        # Later documents overwrite earlier footnotes with the same id
        self.footnotes.update(document.footnotes)
        if text:
            self.texts.append(text)

    @property
    def text(self) -> str:
        return "\n\n".join(self.texts)

    def has_content(self) -> bool:
        return any(chapter.content for chapter in self.chapters)


class EpubParser:
    """Parse an EPUB into a ParsedBook.

    Each instance handles one archive; nothing is shared between parses.
    """

    def __init__(
        self,
        source: EpubSource,
        config: ParserConfig | None = None,
        progress: ProgressSink | None = None,
        cancel: CancelToken | None = None,
    ):
        self.source = source
        self.config = config or ParserConfig()
        self.progress = ProgressReporter(progress)
        self.cancel = cancel

    def parse(self) -> ParsedBook:
        """Run the whole pipeline.

        Raises:
            EpubError: one of the fatal conditions, or cancellation
        """
        try:
            return self._parse()
        except EpubError as e:
            self.progress.emit(ParseStage.ERROR, f"Error: {e}", 0)
            raise

    def _parse(self) -> ParsedBook:
        self.progress.emit(ParseStage.LOADING, "Loading EPUB file...", 10)
        if isinstance(self.source, (bytes, bytearray, str, Path)):
            with ZipArchive(self.source) as archive:
                return self._parse_archive(archive)
        return self._parse_archive(self.source)

    def _parse_archive(self, archive: ArchiveReader) -> ParsedBook:
        self.progress.emit(ParseStage.EXTRACTING_STRUCTURE, "Extracting EPUB structure...", 20)
        package = parse_package(archive, resolve_package_path(archive))

        self.progress.emit(ParseStage.PARSING_TOC, "Parsing table of contents...", 30)
        toc = parse_toc(archive, package.toc_path)

        extractor = ContentExtractor(archive, group_list_items=self.config.group_list_items)
        warnings: list[str] = []
        notices: list[str] = []

        cap = self.config.spine_cap
        spine_total = len(package.spine)
        extraction = self._process(
            extractor,
            spine_documents(package, cap),
            label="chapter",
        )
        truncated = spine_total > cap
        if truncated:
            warnings.append(f"Only the first {cap} of {spine_total} spine items were processed")
            notices.append(
                f"[Content truncated - showing first {cap} chapters of "
                f"{spine_total} total chapters to improve performance]"
            )

        used_fallback = False
        if self._needs_fallback(package, extraction):
            log.info("Spine extraction found too little content, scanning archive")
            fallback, fallback_warnings, fallback_notices = self._fallback(
                archive, extractor, package
            )
            used_fallback = True
            if self._has_readable_content(fallback):
                extraction = fallback
            warnings.extend(fallback_warnings)
            notices.extend(fallback_notices)
            truncated = truncated or bool(fallback_warnings)

        if not self._has_readable_content(extraction):
            entries = archive.list_entries()
            raise NoReadableContentError(
                entries[: self.config.error_listing_limit], total_entries=len(entries)
            )

        text = None
        page_breaks: list[int] = []
        if self.config.mode == ParseMode.TEXT:
            text = "\n\n".join([extraction.text, *notices]).strip()
            page_breaks = find_page_breaks(text)

        self.progress.emit(ParseStage.COMPLETE, "EPUB parsing complete!", 100)

        return ParsedBook(
            metadata=package.metadata,
            chapters=extraction.chapters,
            toc=toc,
            footnotes=extraction.footnotes,
            page_breaks=page_breaks,
            spine_order=package.spine,
            text=text,
            truncated=truncated,
            used_fallback=used_fallback,
            warnings=warnings,
        )

    def _needs_fallback(self, package: PackageDocument, extraction: _Extraction) -> bool:
        if not package.spine:
            return True
        if self.config.mode == ParseMode.TEXT:
            return len(extraction.text.strip()) < self.config.min_text_length
        return not extraction.has_content()

    def _has_readable_content(self, extraction: _Extraction) -> bool:
        if self.config.mode == ParseMode.TEXT:
            return bool(extraction.text.strip())
        return extraction.has_content()

    def _fallback(
        self,
        archive: ArchiveReader,
        extractor: ContentExtractor,
        package: PackageDocument,
    ) -> tuple[_Extraction, list[str], list[str]]:
        limit = self.config.max_fallback_files
        candidates = find_content_documents(archive)
        documents = [(fallback_chapter_id(path, package), path) for path in candidates[:limit]]

        extraction = self._process(extractor, documents, label="alternative file")

        warnings: list[str] = []
        notices: list[str] = []
        if len(candidates) > limit:
            warnings.append(f"Only the first {limit} of {len(candidates)} HTML files were scanned")
            notices.append(
                f"[Content truncated for performance - showing first {limit} HTML files]"
            )
        return extraction, warnings, notices

    def _check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise ParseCancelledError("Parsing cancelled")

    def _process(
        self,
        extractor: ContentExtractor,
        documents: list[tuple[str, str | None]],
        label: str,
    ) -> _Extraction:
        """Extract documents one by one, in order, skipping failures."""
        extraction = _Extraction()
        total = len(documents)
        text_mode = self.config.mode == ParseMode.TEXT

        self.progress.emit(
            ParseStage.PARSING_CONTENT,
            "Processing content...",
            40,
            items_processed=0,
            total_items=total,
        )

        for index, (chapter_id, path) in enumerate(documents):
            self._check_cancelled()

            if path is None:
                log.debug("Spine item %s has no manifest entry, skipping", chapter_id)
            else:
                document = extractor.extract(path, chapter_id)
                if document is not None:
                    text = None
                    if text_mode:
                        text = html_to_text(document.html)
                        if len(text) <= self.config.min_document_length:
                            log.debug("Skipped %s - no meaningful text (%d chars)", path, len(text))
                            text = None
                    extraction.add(document, text)

            self.progress.emit(
                ParseStage.PROCESSING_FORMATTING,
                f"Processing {label} {index + 1} of {total}...",
                40 + round((index + 1) / total * 50),
                items_processed=index + 1,
                total_items=total,
            )

        return extraction


def parse_epub(
    source: EpubSource,
    config: ParserConfig | None = None,
    progress: ProgressSink | None = None,
    cancel: CancelToken | None = None,
) -> ParsedBook:
    """Parse an EPUB (bytes, path or ArchiveReader) into typed chapters."""
    return EpubParser(source, config=config, progress=progress, cancel=cancel).parse()


def extract_text(
    source: EpubSource,
    config: ParserConfig | None = None,
    progress: ProgressSink | None = None,
    cancel: CancelToken | None = None,
) -> ParsedBook:
    """Parse an EPUB in text mode: chapters plus one flattened text view."""
    config = (config or ParserConfig()).model_copy(update={"mode": ParseMode.TEXT})
    return EpubParser(source, config=config, progress=progress, cancel=cancel).parse()
