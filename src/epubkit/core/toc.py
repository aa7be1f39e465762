"""Table of contents from an NCX (EPUB 2) or XHTML nav (EPUB 3) document.

Both formats come out as a flat list of TOCEntry with level 1, in document
order. A broken or missing navigation document only costs the TOC, never the
parse.
"""

import logging
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from epubkit.core.archive import ArchiveReader
from epubkit.core.markup import epub_types, local_name, parse_markup
from epubkit.core.text import normalize_inline
from epubkit.models.book import TOCEntry

log = logging.getLogger(__name__)


def parse_toc(archive: ArchiveReader, toc_path: str | None) -> list[TOCEntry]:
    """Read and parse the navigation document, [] on any problem."""
    if not toc_path:
        return []

    content = archive.read_text(toc_path)
    if content is None:
        log.warning("Table of contents %s is not readable, continuing without it", toc_path)
        return []

    try:
        return parse_toc_document(content)
    except Exception:
        log.warning("Failed to parse table of contents %s", toc_path, exc_info=True)
        return []


def parse_toc_document(content: str) -> list[TOCEntry]:
    """Dispatch on the navigation format found in `content`."""
    lowered = content.lower()
    if "<navmap" in lowered:
        return parse_ncx(parse_markup(content))
    if "<nav" in lowered:
        return parse_nav(parse_markup(content))
    log.debug("Navigation document has neither navMap nor nav")
    return []


def _strip_fragment(href: str) -> str:
    return unquote(href.split("#", 1)[0].strip())


def parse_ncx(soup: BeautifulSoup) -> list[TOCEntry]:
    """One entry per navPoint, from its label text and content src."""
    entries = []
    nav_points = soup.find_all(lambda tag: local_name(tag) == "navpoint")

    for index, nav_point in enumerate(nav_points):
        text = nav_point.find(lambda tag: local_name(tag) == "text")
        content = nav_point.find(lambda tag: local_name(tag) == "content" and tag.has_attr("src"))
        if text is None or content is None:
            continue

        title = normalize_inline(text.get_text())
        href = _strip_fragment(content["src"])
        if not title or not href:
            continue

        entries.append(
            TOCEntry(
                id=nav_point.get("id") or f"toc-{index}",
                title=title,
                href=href,
                level=1,
            )
        )

    return entries


def _toc_nav(soup: BeautifulSoup) -> BeautifulSoup | Tag:
    """The nav marked as the TOC, else the whole document."""
    nav = soup.find(
        lambda tag: tag.name == "nav"
        and ("toc" in epub_types(tag) or tag.get("role") == "doc-toc")
    )
    return nav or soup


def _own_anchor(item: Tag) -> Tag | None:
    """First linked anchor belonging to `item` rather than a nested item."""
    for anchor in item.find_all("a", href=True):
        if anchor.find_parent("li") is item:
            return anchor
    return None


def parse_nav(soup: BeautifulSoup) -> list[TOCEntry]:
    """One entry per list item that carries its own link."""
    entries = []

    for index, item in enumerate(_toc_nav(soup).find_all("li")):
        anchor = _own_anchor(item)
        if anchor is None:
            continue

        title = normalize_inline(anchor.get_text())
        href = _strip_fragment(anchor["href"])
        if not title or not href:
            continue

        entries.append(TOCEntry(id=f"toc-{index}", title=title, href=href, level=1))

    return entries
