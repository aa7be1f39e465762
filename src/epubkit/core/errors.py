"""Exceptions raised by the parsing pipeline.

Only the fatal conditions below abort a parse. Everything else (missing
table of contents, unknown spine ids, unreadable chapters) is absorbed by the
stage that meets it and shows up as a shorter result or a warning.
"""


class EpubError(Exception):
    """Base class for all parser errors."""

    kind = "epub-error"


class InvalidArchiveError(EpubError):
    """The input is not a readable zip archive."""

    kind = "invalid-archive"


class MissingContainerError(EpubError):
    """META-INF/container.xml is absent."""

    kind = "missing-container"

    def __init__(self, path: str = "META-INF/container.xml"):
        super().__init__(f"Invalid EPUB: missing {path}")
        self.path = path


class MissingRootfileError(EpubError):
    """container.xml names no package document."""

    kind = "missing-rootfile"

    def __init__(self, reason: str = "no rootfile found in container.xml"):
        super().__init__(f"Invalid EPUB: {reason}")


class MissingPackageDocumentError(EpubError):
    """The package document named by container.xml does not exist."""

    kind = "missing-package-document"

    def __init__(self, path: str):
        super().__init__(f"Invalid EPUB: package document not found at {path}")
        self.path = path


class NoReadableContentError(EpubError):
    """Neither the spine nor a direct archive scan produced any content."""

    kind = "no-readable-content"

    def __init__(self, entries: list[str] | None = None, total_entries: int = 0):
        self.entries = entries or []
        message = "No readable text content found in EPUB file"
        if self.entries:
            listing = ", ".join(self.entries)
            if total_entries > len(self.entries):
                listing += "..."
            message += f". Files found: {listing}"
        super().__init__(message)


class ParseCancelledError(EpubError):
    """The caller asked to stop between two items."""

    kind = "cancelled"
