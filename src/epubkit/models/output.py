"""Data models for files written by the CLI."""

from datetime import datetime

from pydantic import BaseModel, Field

from epubkit.models.book import BookMetadata, TOCEntry


class ChapterSummary(BaseModel):
    """Manifest line for one written chapter."""

    chapter_id: str
    chapter_index: int
    title: str
    source_file: str
    output_file: str
    element_count: int
    word_count: int


class BookOutput(BaseModel):
    """Book manifest written next to the chapter files."""

    source_path: str
    metadata: BookMetadata
    toc: list[TOCEntry] = Field(default_factory=list)
    footnotes: dict[str, str] = Field(default_factory=dict)
    page_breaks: list[int] = Field(default_factory=list)
    chapters: list[ChapterSummary] = Field(default_factory=list)
    text_file: str | None = None
    truncated: bool = False
    used_fallback: bool = False
    warnings: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
