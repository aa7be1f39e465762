"""Data models for parsed book structure."""

from pydantic import BaseModel, ConfigDict, Field

from epubkit.models.content import ContentElement

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"


class BookMetadata(BaseModel):
    """Dublin Core metadata from the package document."""

    model_config = ConfigDict(frozen=True)

    title: str = UNKNOWN_TITLE
    author: str = UNKNOWN_AUTHOR
    authors: list[str] = Field(default_factory=list)
    language: str | None = None
    identifier: str | None = None
    publisher: str | None = None
    date: str | None = None
    description: str | None = None


class TOCEntry(BaseModel):
    """Single entry in table of contents."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    href: str
    level: int = 1
    children: list["TOCEntry"] = Field(default_factory=list)


class Chapter(BaseModel):
    """One content document turned into typed elements."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    href: str = ""  # archive path of the source document
    content: list[ContentElement] = Field(default_factory=list)
    page_break_before: bool = False
    page_break_after: bool = False


class ParsedBook(BaseModel):
    """Complete parsed EPUB structure."""

    model_config = ConfigDict(frozen=True)

    metadata: BookMetadata
    chapters: list[Chapter] = Field(default_factory=list)
    toc: list[TOCEntry] = Field(default_factory=list)
    footnotes: dict[str, str] = Field(default_factory=dict)
    # Offsets of [PAGE BREAK] markers in `text`; text mode only
    page_breaks: list[int] = Field(default_factory=list)
    spine_order: list[str] = Field(default_factory=list)
    text: str | None = None
    truncated: bool = False
    used_fallback: bool = False
    warnings: list[str] = Field(default_factory=list)
