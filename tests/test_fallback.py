"""
Tests for the archive scan used when the spine yields too little.
"""

import pytest

from epub_factory import DictArchive
from epubkit.core.fallback import fallback_chapter_id, find_content_documents, is_content_candidate
from epubkit.models.package import ManifestItem, PackageDocument


class TestCandidates:
    """Tests for choosing documents to scan."""

    @pytest.mark.parametrize(
        "path",
        ["OEBPS/ch1.xhtml", "text/part.html", "chapter.HTM"],
    )
    def test_html_documents_accepted(self, path):
        assert is_content_candidate(path)

    @pytest.mark.parametrize(
        "path",
        [
            "OEBPS/cover.xhtml",
            "OEBPS/Cover.html",
            "OEBPS/titlepage.xhtml",
            "OEBPS/jacket.xhtml",
            "__MACOSX/OEBPS/._ch1.xhtml",
            "OEBPS/style.css",
            "OEBPS/images/fig.png",
        ],
    )
    def test_excluded_documents(self, path):
        assert not is_content_candidate(path)

    def test_sorted_by_path(self):
        archive = DictArchive(
            {
                "OEBPS/b.xhtml": "",
                "OEBPS/a.xhtml": "",
                "OEBPS/cover.xhtml": "",
                "OEBPS/content.opf": "",
                "META-INF/container.xml": "",
            }
        )
        assert find_content_documents(archive) == ["OEBPS/a.xhtml", "OEBPS/b.xhtml"]

    def test_limit(self):
        archive = DictArchive({f"t/{i:02d}.html": "" for i in range(5)})
        assert find_content_documents(archive, limit=2) == ["t/00.html", "t/01.html"]


class TestFallbackChapterId:
    """Tests for naming chapters found by the scan."""

    def test_manifest_id_when_declared(self):
        package = PackageDocument(
            path="OEBPS/content.opf",
            base_dir="OEBPS/",
            manifest={"intro": ManifestItem(id="intro", href="intro.xhtml")},
        )
        assert fallback_chapter_id("OEBPS/intro.xhtml", package) == "intro"

    def test_path_when_undeclared(self):
        package = PackageDocument(path="content.opf")
        assert fallback_chapter_id("stray.html", package) == "stray.html"
