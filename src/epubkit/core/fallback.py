"""Find content documents by scanning the archive instead of the spine."""

import logging

from epubkit.core.archive import ArchiveReader
from epubkit.models.package import PackageDocument

log = logging.getLogger(__name__)

HTML_EXTENSIONS = (".html", ".xhtml", ".htm")
# Paths containing any of these hold covers, title pages or macOS metadata
EXCLUDED_PATH_MARKERS = ("__macosx", "jacket", "cover", "titlepage")


def is_content_candidate(path: str) -> bool:
    lowered = path.lower()
    if not lowered.endswith(HTML_EXTENSIONS):
        return False
    return not any(marker in lowered for marker in EXCLUDED_PATH_MARKERS)


def find_content_documents(archive: ArchiveReader, limit: int | None = None) -> list[str]:
    """HTML-like entries that are not covers or title pages, sorted by path."""
    candidates = sorted(path for path in archive.list_entries() if is_content_candidate(path))
    log.debug("Fallback scan found %d candidate documents", len(candidates))
    if limit is not None:
        return candidates[:limit]
    return candidates


def fallback_chapter_id(path: str, package: PackageDocument) -> str:
    """Manifest id of `path` when it is declared, else the path itself."""
    return package.id_for_path(path) or path
