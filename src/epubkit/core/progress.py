"""Deliver progress events to an optional listener."""

import logging
from typing import Callable, Protocol

from epubkit.models.progress import ParseProgress, ParseStage

log = logging.getLogger(__name__)

ProgressSink = Callable[[ParseProgress], None]


class CancelToken(Protocol):
    """Anything with `is_set()`, e.g. threading.Event."""

    def is_set(self) -> bool: ...


class ProgressReporter:
    """Send progress records to a sink; a failing sink never stops parsing."""

    def __init__(self, sink: ProgressSink | None = None):
        self.sink = sink

    def emit(
        self,
        stage: ParseStage,
        message: str,
        percent: int,
        items_processed: int | None = None,
        total_items: int | None = None,
    ) -> None:
        if self.sink is None:
            return

        event = ParseProgress(
            stage=stage,
            message=message,
            percent=max(0, min(100, percent)),
            items_processed=items_processed,
            total_items=total_items,
        )
        try:
            self.sink(event)
        except Exception:
            log.warning("Progress listener raised, ignoring", exc_info=True)
