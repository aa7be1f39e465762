"""Lenient EPUB parsing into typed chapters, a table of contents and footnotes."""

from epubkit.core.epub_parser import EpubParser, extract_text, parse_epub
from epubkit.core.errors import (
    EpubError,
    InvalidArchiveError,
    MissingContainerError,
    MissingPackageDocumentError,
    MissingRootfileError,
    NoReadableContentError,
    ParseCancelledError,
)
from epubkit.models import ParsedBook, ParseMode, ParserConfig, ParseProgress

__version__ = "0.1.0"

__all__ = [
    "EpubParser",
    "parse_epub",
    "extract_text",
    "ParsedBook",
    "ParseMode",
    "ParserConfig",
    "ParseProgress",
    "EpubError",
    "InvalidArchiveError",
    "MissingContainerError",
    "MissingRootfileError",
    "MissingPackageDocumentError",
    "NoReadableContentError",
    "ParseCancelledError",
]
