"""Locate the package document through META-INF/container.xml."""

import logging

from epubkit.core.archive import ArchiveReader
from epubkit.core.errors import MissingContainerError, MissingRootfileError
from epubkit.core.markup import parse_markup

log = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"


def resolve_package_path(archive: ArchiveReader) -> str:
    """Return the archive path of the OPF package document.

    Raises:
        MissingContainerError: container.xml is not in the archive
        MissingRootfileError: no rootfile element carries a full-path
    """
    container_xml = archive.read_text(CONTAINER_PATH)
    if container_xml is None:
        raise MissingContainerError(CONTAINER_PATH)

    soup = parse_markup(container_xml)
    if soup.find("rootfile") is None:
        raise MissingRootfileError("no rootfile found in container.xml")

    rootfile = soup.find("rootfile", attrs={"full-path": True})
    full_path = rootfile.get("full-path", "").strip() if rootfile else ""
    if not full_path:
        raise MissingRootfileError("no full-path in rootfile")

    log.debug("Package document at %s", full_path)
    return full_path
