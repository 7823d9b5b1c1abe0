from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QThread, Signal

from ..compare import compare_images
from ..core.types import ImageBuffer, ProgressEvent
from ..errors import ComparisonCancelled, PixelCompareError
from ..presets import ComparisonSettings
from ..progress import CancelToken

logger = logging.getLogger(__name__)


class ComparisonThread(QThread):
    """Background worker that runs a comparison off the GUI thread."""

    progress = Signal(float)
    finished = Signal(str, object)

    def __init__(
        self,
        image1: ImageBuffer,
        image2: ImageBuffer,
        settings: ComparisonSettings,
        *,
        batch_size: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.image1 = image1
        self.image2 = image2
        self.settings = settings
        self.batch_size = batch_size
        self._token = CancelToken()

    def cancel(self) -> None:
        self._token.cancel()

    def is_cancelled(self) -> bool:
        return self._token.cancelled

    def _on_progress(self, event: ProgressEvent) -> None:
        self.progress.emit(event.progress)

    def run(self) -> None:
        try:
            comparison = compare_images(
                self.image1,
                self.image2,
                self.settings,
                self._on_progress,
                self._token,
                batch_size=self.batch_size,
                yield_control=self.yieldCurrentThread,
            )
        except ComparisonCancelled:
            self.finished.emit("cancelled", None)
            return
        except PixelCompareError as exc:
            self.finished.emit("error", str(exc))
            return
        except Exception as exc:
            logger.exception("Comparison failed")
            self.finished.emit("error", str(exc))
            return
        self.finished.emit("success", comparison)
