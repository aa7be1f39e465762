"""Parse the OPF package document: metadata, manifest, spine and TOC reference."""

import logging
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from epubkit.core.archive import ArchiveReader
from epubkit.core.errors import MissingPackageDocumentError
from epubkit.core.markup import local_name, parse_markup
from epubkit.core.text import normalize_inline
from epubkit.models.book import UNKNOWN_AUTHOR, UNKNOWN_TITLE, BookMetadata
from epubkit.models.package import NCX_MEDIA_TYPE, ManifestItem, PackageDocument

log = logging.getLogger(__name__)


def package_dir(path: str) -> str:
    """Directory prefix of the package document, with trailing slash."""
    return path[: path.rfind("/") + 1]


def parse_package(archive: ArchiveReader, path: str) -> PackageDocument:
    """Read the package document at `path`.

    Raises:
        MissingPackageDocumentError: nothing is stored at `path`
    """
    opf = archive.read_text(path)
    if opf is None:
        raise MissingPackageDocumentError(path)

    soup = parse_markup(opf)
    manifest, toc_href = extract_manifest(soup)
    spine = extract_spine(soup)

    log.debug(
        "Package %s: %d manifest items, %d spine items, toc=%s",
        path,
        len(manifest),
        len(spine),
        toc_href,
    )

    return PackageDocument(
        path=path,
        base_dir=package_dir(path),
        metadata=extract_metadata(soup),
        manifest=manifest,
        spine=spine,
        toc_href=toc_href,
    )


def _find_all(scope: BeautifulSoup | Tag, name: str) -> list[Tag]:
    """Elements whose local name is `name`, with or without a prefix."""
    return scope.find_all(lambda tag: local_name(tag) == name)


def _texts(scope: BeautifulSoup | Tag, name: str) -> list[str]:
    values = []
    for element in _find_all(scope, name):
        text = normalize_inline(element.get_text())
        if text:
            values.append(text)
    return values


def extract_metadata(soup: BeautifulSoup) -> BookMetadata:
    """Extract Dublin Core fields; each one is optional."""
    scope = soup.find(lambda tag: local_name(tag) == "metadata") or soup

    def get_one(name: str) -> str | None:
        # An unprefixed <title> can be hoisted out of <metadata> by the HTML parser
        values = _texts(scope, name) or _texts(soup, name)
        return values[0] if values else None

    authors = _texts(scope, "creator")

    return BookMetadata(
        title=get_one("title") or UNKNOWN_TITLE,
        author=authors[0] if authors else UNKNOWN_AUTHOR,
        authors=authors,
        language=get_one("language"),
        identifier=get_one("identifier"),
        publisher=get_one("publisher"),
        date=get_one("date"),
        description=get_one("description"),
    )


def _is_toc_item(item: ManifestItem) -> bool:
    if item.media_type == NCX_MEDIA_TYPE:
        return True
    if "toc" in item.id.lower() or "toc" in item.href.lower():
        return True
    return "nav" in (item.properties or "").split()


def extract_manifest(soup: BeautifulSoup) -> tuple[dict[str, ManifestItem], str | None]:
    """Map manifest ids to items and find the navigation document.

    Items missing `id` or `href` are skipped. A repeated id replaces the
    earlier item. The first item that looks like a table of contents wins.
    """
    manifest: dict[str, ManifestItem] = {}
    toc_href: str | None = None

    for element in _find_all(soup, "item"):
        item_id = (element.get("id") or "").strip()
        href = (element.get("href") or "").strip()
        if not item_id or not href:
            log.debug("Skipping manifest item without id/href: %s", element.attrs)
            continue

        item = ManifestItem(
            id=item_id,
            href=unquote(href),
            media_type=element.get("media-type"),
            properties=element.get("properties"),
        )
        manifest[item_id] = item

        if toc_href is None and _is_toc_item(item):
            toc_href = item.href

    return manifest, toc_href


def extract_spine(soup: BeautifulSoup) -> list[str]:
    """Spine idrefs in reading order, duplicates kept."""
    spine = []
    for element in _find_all(soup, "itemref"):
        idref = (element.get("idref") or "").strip()
        if idref:
            spine.append(idref)
    return spine
