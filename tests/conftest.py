"""Shared fixtures: small EPUB books built in memory."""

from pathlib import Path

import pytest

from epub_factory import build_epub, long_chapter, xhtml


@pytest.fixture
def simple_book() -> bytes:
    """Three chapters with an NCX table of contents."""
    return build_epub(
        [
            ("chapter1.xhtml", xhtml("<h1>Chapter One</h1><p>The first chapter.</p>")),
            ("chapter2.xhtml", xhtml("<h1>Chapter Two</h1><p>The second chapter.</p>")),
            ("chapter3.xhtml", xhtml("<h1>Chapter Three</h1><p>The third chapter.</p>")),
        ]
    )


@pytest.fixture
def long_book() -> bytes:
    """Three chapters long enough for text mode to keep the spine result."""
    return build_epub(
        [
            ("chapter1.xhtml", long_chapter("Chapter One")),
            ("chapter2.xhtml", long_chapter("Chapter Two")),
            ("chapter3.xhtml", long_chapter("Chapter Three")),
        ]
    )


@pytest.fixture
def book_file(tmp_path: Path, simple_book: bytes) -> Path:
    path = tmp_path / "Simple Book.epub"
    path.write_bytes(simple_book)
    return path
