"""Data models."""

from epubkit.models.book import (
    BookMetadata,
    Chapter,
    ParsedBook,
    TOCEntry,
)
from epubkit.models.config import (
    ParseMode,
    ParserConfig,
)
from epubkit.models.content import (
    BlockquoteElement,
    ContainerElement,
    ContentElement,
    DivElement,
    FootnoteRefElement,
    HeadingElement,
    ImageElement,
    ListItemElement,
    PageBreakElement,
    ParagraphElement,
)
from epubkit.models.output import (
    BookOutput,
    ChapterSummary,
)
from epubkit.models.package import (
    ManifestItem,
    PackageDocument,
)
from epubkit.models.progress import (
    ParseProgress,
    ParseStage,
)

__all__ = [
    # Book models
    "BookMetadata",
    "Chapter",
    "ParsedBook",
    "TOCEntry",
    # Content elements
    "ContentElement",
    "HeadingElement",
    "ParagraphElement",
    "DivElement",
    "BlockquoteElement",
    "ListItemElement",
    "PageBreakElement",
    "FootnoteRefElement",
    "ImageElement",
    "ContainerElement",
    # Output models
    "BookOutput",
    "ChapterSummary",
    # Package models
    "ManifestItem",
    "PackageDocument",
    # Parse control
    "ParseMode",
    "ParserConfig",
    "ParseProgress",
    "ParseStage",
]
