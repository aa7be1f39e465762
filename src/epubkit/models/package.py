"""Data models for the OPF package document."""

from pydantic import BaseModel, ConfigDict, Field

from epubkit.models.book import BookMetadata

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"


class ManifestItem(BaseModel):
    """Manifest resource declared in the package document."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str
    media_type: str | None = None
    properties: str | None = None


class PackageDocument(BaseModel):
    """Metadata, manifest and spine of one EPUB."""

    model_config = ConfigDict(frozen=True)

    path: str
    base_dir: str = ""
    metadata: BookMetadata = Field(default_factory=BookMetadata)
    manifest: dict[str, ManifestItem] = Field(default_factory=dict)
    spine: list[str] = Field(default_factory=list)
    toc_href: str | None = None

    def resolve(self, href: str) -> str:
        """Turn a manifest href into an archive path."""
        return self.base_dir + href

    @property
    def toc_path(self) -> str | None:
        if self.toc_href is None:
            return None
        return self.resolve(self.toc_href)

    def spine_path(self, idref: str) -> str | None:
        """Archive path for a spine id, None when the manifest lacks it."""
        item = self.manifest.get(idref)
        if item is None:
            return None
        return self.resolve(item.href)

    def id_for_path(self, path: str) -> str | None:
        """Manifest id whose resolved href equals `path`."""
        for item in self.manifest.values():
            if self.resolve(item.href) == path:
                return item.id
        return None
