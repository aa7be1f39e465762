"""Progress events emitted while parsing."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ParseStage(str, Enum):
    """Pipeline stage reported to progress listeners."""

    LOADING = "loading"
    EXTRACTING_STRUCTURE = "extracting-structure"
    PARSING_TOC = "parsing-toc"
    PARSING_CONTENT = "parsing-content"
    PROCESSING_FORMATTING = "processing-formatting"
    COMPLETE = "complete"
    ERROR = "error"


class ParseProgress(BaseModel):
    """One progress record. Observational only."""

    model_config = ConfigDict(frozen=True)

    stage: ParseStage
    message: str
    percent: int = Field(ge=0, le=100)
    items_processed: int | None = None
    total_items: int | None = None
