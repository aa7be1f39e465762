"""Parser configuration."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ParseMode(str, Enum):
    """How content documents are turned into output."""

    STRUCTURED = "structured"  # typed elements per chapter
    TEXT = "text"  # additionally flattened into one text view


DEFAULT_SPINE_CAPS = {
    ParseMode.STRUCTURED: 25,
    ParseMode.TEXT: 20,
}


class ParserConfig(BaseModel):
    """Limits and thresholds for one parse."""

    model_config = ConfigDict(frozen=True)

    mode: ParseMode = ParseMode.STRUCTURED
    # None picks the per-mode default from DEFAULT_SPINE_CAPS
    max_spine_items: int | None = Field(default=None, ge=1)
    max_fallback_files: int = Field(default=15, ge=1)
    # Text mode falls back to scanning below this many characters
    min_text_length: int = Field(default=500, ge=0)
    # Text mode drops flattened documents shorter than this
    min_document_length: int = Field(default=10, ge=0)
    error_listing_limit: int = Field(default=20, ge=0)
    group_list_items: bool = False

    @property
    def spine_cap(self) -> int:
        if self.max_spine_items is not None:
            return self.max_spine_items
        return DEFAULT_SPINE_CAPS[self.mode]
