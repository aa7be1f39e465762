"""Turn content documents into chapters of typed elements."""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from bs4 import (
    BeautifulSoup,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from epubkit.core.archive import ArchiveReader
from epubkit.core.markup import class_list, epub_types, parse_markup
from epubkit.core.text import normalize_inline
from epubkit.models.book import Chapter
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
    TextElement,
)
from epubkit.models.package import PackageDocument

log = logging.getLogger(__name__)

NON_CONTENT_TAGS = ["style", "script", "meta", "link"]
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
LIST_TAGS = {"ul", "ol"}
# Blocks without a dedicated element type; their text becomes paragraphs
GENERIC_BLOCK_TAGS = {
    "section", "article", "aside", "header", "footer", "nav", "main",
    "figure", "figcaption", "pre", "table", "tr", "dl", "dt", "dd",
}
BLOCK_TAGS = (
    set(HEADING_TAGS) | {"p", "div", "blockquote", "li"} | LIST_TAGS | GENERIC_BLOCK_TAGS
)
FOOTNOTE_CLASS = "footnote"
FOOTNOTE_EPUB_TYPES = {"footnote", "endnote", "rearnote"}
PAGE_BREAK_EPUB_TYPES = {"pagebreak"}

_TEXT_TYPES: dict[str, type[TextElement]] = {
    "p": ParagraphElement,
    "div": DivElement,
    "blockquote": BlockquoteElement,
    "li": ListItemElement,
}
_DOCUMENT_EXTENSION_RE = re.compile(r"\.(?:html|xhtml|htm)$", re.IGNORECASE)
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

ElementFactory = Callable[[str], ContentElement]


def _text_factory(tag_name: str) -> ElementFactory:
    """Element constructor for text finalized inside `tag_name`."""
    if tag_name in HEADING_TAGS:
        level = int(tag_name[1])
        return lambda text: HeadingElement(level=level, content=text)
    element_type = _TEXT_TYPES.get(tag_name, ParagraphElement)
    return lambda text: element_type(content=text)


_paragraph = _text_factory("p")


def _is_footnote(tag: Tag) -> bool:
    if FOOTNOTE_CLASS in class_list(tag):
        return True
    return bool(FOOTNOTE_EPUB_TYPES.intersection(epub_types(tag)))


def _is_page_break_marker(tag: Tag) -> bool:
    if PAGE_BREAK_EPUB_TYPES.intersection(epub_types(tag)):
        return True
    return tag.get("role") == "doc-pagebreak"


def _style(tag: Tag) -> str:
    return (tag.get("style") or "").lower()


class ElementBuilder:
    """Walk a parsed document and emit block-level content elements.

    Inline markup is transparent: its text joins the enclosing block. When a
    nested block starts, the text gathered so far is finalized with the type
    of the enclosing block, so `<div>Intro<p>Body</p></div>` yields a div
    element followed by a paragraph.
    """

    def __init__(self, footnote_ids: set[str] | None = None, group_list_items: bool = False):
        self.footnote_ids = footnote_ids or set()
        self.group_list_items = group_list_items

    def build(self, root: Tag) -> list[ContentElement]:
        return self._collect(root, _paragraph)

    def _collect(self, node: Tag, make_text: ElementFactory) -> list[ContentElement]:
        elements: list[ContentElement] = []
        run: list[str] = []
        refs: list[FootnoteRefElement] = []

        def flush() -> None:
            text = normalize_inline("".join(run))
            if text:
                elements.append(make_text(text))
            elements.extend(refs)
            run.clear()
            refs.clear()

        def visit(parent: Tag) -> None:
            for child in parent.children:
                if isinstance(child, NavigableString):
                    if not isinstance(child, _SKIPPED_STRINGS):
                        run.append(str(child))
                    continue
                if not isinstance(child, Tag):
                    continue

                name = child.name
                if name in ("head", "title"):
                    continue
                if name == "br":
                    run.append(" ")
                elif name in ("img", "image"):
                    image = self._image(child)
                    if image is not None:
                        flush()
                        elements.append(image)
                elif _is_page_break_marker(child):
                    flush()
                    elements.append(PageBreakElement(label=child.get("title") or None))
                    # Self-closing markers swallow the following siblings in HTML parsing
                    visit(child)
                elif name in BLOCK_TAGS:
                    flush()
                    elements.extend(self._block(child))
                else:
                    ref = self._note_ref(child)
                    if ref is not None:
                        refs.append(ref)
                    else:
                        visit(child)

        visit(node)
        flush()
        return elements

    def _block(self, tag: Tag) -> list[ContentElement]:
        name = tag.name
        style = _style(tag)

        if name in LIST_TAGS:
            items = self._collect(tag, _paragraph)
            if self.group_list_items and items:
                items = [ContainerElement(role="list", children=items)]
        elif name == "blockquote" and tag.find(list(BLOCK_TAGS)) is not None:
            children = self._collect(tag, _paragraph)
            items = [ContainerElement(role="blockquote", children=children)] if children else []
        else:
            items = self._collect(tag, _text_factory(name))

        if "page-break-before" in style:
            items.insert(0, PageBreakElement())
        if "page-break-after" in style:
            items.append(PageBreakElement())
        return items

    def _image(self, tag: Tag) -> ImageElement | None:
        src = tag.get("src") or tag.get("xlink:href") or tag.get("href")
        if not src:
            return None
        return ImageElement(src=src, alt=tag.get("alt") or None)

    def _note_ref(self, tag: Tag) -> FootnoteRefElement | None:
        """Footnote reference for note-linking anchors, else None."""
        if tag.name != "a":
            return None
        href = tag.get("href") or ""
        if "#" not in href:
            return None
        fragment = href.split("#", 1)[1]
        if not fragment:
            return None
        if "noteref" in epub_types(tag) or fragment in self.footnote_ids:
            return FootnoteRefElement(ref=fragment, content=normalize_inline(tag.get_text()))
        return None


def strip_non_content(soup: BeautifulSoup) -> None:
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()


def flatten_elements(elements: list[ContentElement]) -> str:
    """Join the text of elements (containers included) with spaces."""
    parts = []
    for element in elements:
        if isinstance(element, ContainerElement):
            parts.append(flatten_elements(element.children))
        elif isinstance(element, (HeadingElement, ParagraphElement, DivElement,
                                  BlockquoteElement, ListItemElement)):
            parts.append(element.content)
    return " ".join(part for part in parts if part)


def extract_footnotes(soup: BeautifulSoup) -> dict[str, str]:
    """Remove footnote blocks from the document and return id -> text.

    Blocks without an id or without text are removed but not recorded.
    """
    footnotes: dict[str, str] = {}
    builder = ElementBuilder()
    # Outermost blocks only; nested ones go with their parent
    blocks = [tag for tag in soup.find_all(_is_footnote) if tag.find_parent(_is_footnote) is None]

    for block in blocks:
        note_id = (block.get("id") or "").strip()
        text = flatten_elements(builder.build(block))
        if note_id and text:
            footnotes[note_id] = text
        else:
            log.debug("Dropping footnote block without id or text: %r", note_id)
        block.decompose()

    return footnotes


def title_from_path(path: str) -> str:
    """File name without directory and HTML extension."""
    return _DOCUMENT_EXTENSION_RE.sub("", path.rsplit("/", 1)[-1])


def _document_title(soup: BeautifulSoup, path: str) -> str:
    """<title>, then the first heading, then the file name."""
    title_tag = soup.find("title")
    if title_tag is not None:
        title = normalize_inline(title_tag.get_text())
        if title:
            return title

    for heading in soup.find_all(HEADING_TAGS):
        title = normalize_inline(heading.get_text())
        if title:
            return title

    return title_from_path(path)


def extract_chapter(
    html: str,
    chapter_id: str,
    path: str,
    group_list_items: bool = False,
) -> tuple[Chapter, dict[str, str]]:
    """Parse one content document into a chapter and its footnotes."""
    soup = parse_markup(html)
    strip_non_content(soup)
    footnotes = extract_footnotes(soup)

    builder = ElementBuilder(set(footnotes), group_list_items=group_list_items)
    root = soup.body or soup

    chapter = Chapter(
        id=chapter_id,
        title=_document_title(soup, path),
        href=path,
        content=builder.build(root),
        page_break_before="page-break-before" in html,
        page_break_after="page-break-after" in html,
    )
    return chapter, footnotes


@dataclass
class ExtractedDocument:
    """Chapter parsed from one archive entry, with its raw markup."""

    chapter: Chapter
    html: str
    footnotes: dict[str, str] = field(default_factory=dict)


class ContentExtractor:
    """Read content documents from the archive and parse them."""

    def __init__(self, archive: ArchiveReader, group_list_items: bool = False):
        self.archive = archive
        self.group_list_items = group_list_items

    def extract(self, path: str, chapter_id: str) -> ExtractedDocument | None:
        """Parse the document at `path`; None when it cannot be read or parsed."""
        try:
            html = self.archive.read_text(path)
            if html is None:
                log.debug("Content document %s is missing, skipping", path)
                return None
            chapter, footnotes = extract_chapter(
                html, chapter_id, path, group_list_items=self.group_list_items
            )
        except Exception:
            log.warning("Failed to process %s, skipping", path, exc_info=True)
            return None

        return ExtractedDocument(chapter=chapter, html=html, footnotes=footnotes)


def spine_documents(package: PackageDocument, limit: int) -> list[tuple[str, str | None]]:
    """(idref, archive path) for the first `limit` spine items.

    The path is None for ids the manifest does not declare.
    """
    return [(idref, package.spine_path(idref)) for idref in package.spine[:limit]]
