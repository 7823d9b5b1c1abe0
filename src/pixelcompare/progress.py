"""Progress notifications and cooperative cancellation."""
from __future__ import annotations

import logging
import threading
from typing import Callable

from .core.types import ProgressEvent

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]


class CancelToken:
    """Cancellation flag shared between a comparison run and its caller.

    ``cancel`` may be called from any thread; the comparator only polls the
    flag between batches.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def make_event(processed: int, total: int, matching: int, width: int) -> ProgressEvent:
    last = processed - 1
    return ProgressEvent(
        progress=processed / total * 100,
        row=last // width,
        col=last % width,
        processed=processed,
        similarity=matching / processed * 100,
    )


def log_progress(event: ProgressEvent) -> None:
    logger.debug(
        "%.1f%% done (row %d, col %d), %d pixels, running similarity %.2f%%",
        event.progress,
        event.row,
        event.col,
        event.processed,
        event.similarity,
    )
