"""Read-only access to the entries of an EPUB zip."""

import io
import logging
import zipfile
import zlib
from pathlib import Path
from typing import Protocol, runtime_checkable

from epubkit.core.errors import InvalidArchiveError

log = logging.getLogger(__name__)


@runtime_checkable
class ArchiveReader(Protocol):
    """Capability the pipeline needs from an archive."""

    def list_entries(self) -> list[str]:
        """Names of all file entries, directories excluded."""
        ...

    def read_text(self, path: str) -> str | None:
        """Entry decoded as text, None when absent."""
        ...

    def read_bytes(self, path: str) -> bytes | None:
        """Raw entry bytes, None when absent."""
        ...


def decode_text(data: bytes) -> str:
    """Decode entry bytes as UTF-8, falling back to latin-1."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1", errors="replace")


class ZipArchive:
    """ArchiveReader over a zip held in memory or on disk."""

    def __init__(self, source: bytes | Path | str):
        try:
            if isinstance(source, (bytes, bytearray)):
                self._zip = zipfile.ZipFile(io.BytesIO(source))
            else:
                self._zip = zipfile.ZipFile(Path(source))
        except (zipfile.BadZipFile, OSError) as e:
            raise InvalidArchiveError(f"Not a zip archive: {e}") from e
        self._names = {info.filename for info in self._zip.infolist()}

    def list_entries(self) -> list[str]:
        return [name for name in self._zip.namelist() if not name.endswith("/")]

    def read_bytes(self, path: str) -> bytes | None:
        if path not in self._names:
            return None
        try:
            return self._zip.read(path)
        except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError) as e:
            # Corrupt or encrypted entry
            log.warning("Could not read %s: %s", path, e)
            return None

    def read_text(self, path: str) -> str | None:
        data = self.read_bytes(path)
        if data is None:
            return None
        return decode_text(data)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ZipArchive":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
