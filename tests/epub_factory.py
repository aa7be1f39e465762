"""Build small EPUB archives in memory for tests."""

import io
import zipfile

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

LOREM = (
    "It was a bright cold day in April, and the clocks were striking thirteen. "
    "The hallway smelt of boiled cabbage and old rag mats. "
)


def xhtml(body: str, title: str | None = None) -> str:
    head = f"<title>{title}</title>" if title else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">\n'
        f"<head>{head}</head>\n"
        f"<body>{body}</body>\n"
        "</html>\n"
    )


def long_chapter(heading: str, paragraphs: int = 5) -> str:
    """Chapter whose flattened text is well above the text-mode threshold."""
    body = f"<h1>{heading}</h1>" + "".join(f"<p>{LOREM}</p>" for _ in range(paragraphs))
    return xhtml(body)


def ncx(entries: list[tuple[str, str]]) -> str:
    points = "".join(
        f'<navPoint id="np{i}" playOrder="{i}">'
        f"<navLabel><text>{title}</text></navLabel>"
        f'<content src="{href}"/>'
        "</navPoint>"
        for i, (title, href) in enumerate(entries, start=1)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">'
        "<docTitle><text>Book</text></docTitle>"
        f"<navMap>{points}</navMap>"
        "</ncx>\n"
    )


def nav(entries: list[tuple[str, str]]) -> str:
    items = "".join(f'<li><a href="{href}">{title}</a></li>' for title, href in entries)
    return xhtml(
        f'<nav epub:type="toc" id="toc"><h1>Contents</h1><ol>{items}</ol></nav>',
        title="Contents",
    )


def package_xml(metadata: str, items: list[str], spine: list[str]) -> str:
    itemrefs = "".join(f'<itemref idref="{idref}"/>' for idref in spine)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="bookid">\n'
        f'<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">{metadata}</metadata>\n'
        f"<manifest>{''.join(items)}</manifest>\n"
        f'<spine toc="ncx">{itemrefs}</spine>\n'
        "</package>\n"
    )


def zip_bytes(files: dict[str, str | bytes]) -> bytes:
    """Zip `files` with the mimetype entry stored first, as EPUB requires."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        if "mimetype" in files:
            archive.writestr("mimetype", files["mimetype"], compress_type=zipfile.ZIP_STORED)
        for name, data in files.items():
            if name != "mimetype":
                archive.writestr(name, data, compress_type=zipfile.ZIP_DEFLATED)
    return buffer.getvalue()


def build_files(
    chapters: list[tuple[str, str]],
    title: str = "Test Book",
    authors: tuple[str, ...] = ("Test Author",),
    toc: str | None = "ncx",
    spine: list[str] | None = None,
    opf_dir: str = "OEBPS",
    extra_files: dict[str, str | bytes] | None = None,
) -> dict[str, str | bytes]:
    """Archive entries for a book whose chapters get ids ch1, ch2, ...

    `chapters` holds (href, markup) pairs relative to the package document.
    """
    prefix = f"{opf_dir}/" if opf_dir else ""
    opf_path = f"{prefix}content.opf"
    files: dict[str, str | bytes] = {
        "mimetype": "application/epub+zip",
        "META-INF/container.xml": CONTAINER_XML.format(opf_path=opf_path),
    }

    items = []
    ids = []
    toc_entries = []
    for i, (href, markup) in enumerate(chapters, start=1):
        item_id = f"ch{i}"
        ids.append(item_id)
        items.append(f'<item id="{item_id}" href="{href}" media-type="application/xhtml+xml"/>')
        files[prefix + href] = markup
        toc_entries.append((f"Chapter {i}", href))

    if toc == "ncx":
        items.append('<item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>')
        files[prefix + "toc.ncx"] = ncx(toc_entries)
    elif toc == "nav":
        items.append(
            '<item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>'
        )
        files[prefix + "nav.xhtml"] = nav(toc_entries)

    metadata = f"<dc:title>{title}</dc:title>" + "".join(
        f"<dc:creator>{author}</dc:creator>" for author in authors
    )
    metadata += "<dc:language>en</dc:language>"

    files[opf_path] = package_xml(metadata, items, ids if spine is None else spine)
    files.update(extra_files or {})
    return files


def build_epub(chapters: list[tuple[str, str]], **kwargs) -> bytes:
    return zip_bytes(build_files(chapters, **kwargs))


class DictArchive:
    """ArchiveReader over a plain dict, for tests that skip zipping."""

    def __init__(self, files: dict[str, str | bytes]):
        self.files = files

    def list_entries(self) -> list[str]:
        return list(self.files)

    def read_bytes(self, path: str) -> bytes | None:
        data = self.files.get(path)
        if isinstance(data, str):
            return data.encode("utf-8")
        return data

    def read_text(self, path: str) -> str | None:
        data = self.files.get(path)
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return data
