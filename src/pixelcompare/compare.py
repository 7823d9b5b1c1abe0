"""Batch-wise pixel comparison with progress reporting and cancellation.

:class:`PixelComparator` holds the state of one run and exposes a pure batch
step; :func:`compare_pixels` is the driver loop that checks the cancel token,
publishes progress and yields between batches. Callers wanting another
cadence (timers, worker threads) can drive :class:`PixelComparator` directly.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import replace
from typing import Callable, Optional, Tuple, Union

import numpy as np

from .core.types import CHANNELS, Comparison, ComparisonResult, DiffMap, ImageBuffer, ProgressEvent
from .errors import ComparisonCancelled, InputImageError, InvalidRegionError, InvalidSettingsError
from .presets import ComparisonSettings
from .progress import CancelToken, ProgressSink, make_event
from .region import extract_regions

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 2000

PixelData = Union[bytes, bytearray, memoryview, np.ndarray]


class RunState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PixelComparator:
    """State of a single comparison run over two equally shaped RGBA buffers."""

    def __init__(
        self,
        width: int,
        height: int,
        first: PixelData,
        second: PixelData,
        settings: ComparisonSettings,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if width <= 0 or height <= 0:
            raise InvalidRegionError(f"Comparison region has zero area ({width}x{height})")
        if batch_size < 1:
            raise InvalidSettingsError(f"Batch size must be at least 1, got {batch_size}")
        self.width = width
        self.height = height
        self.batch_size = batch_size
        self.total_pixels = width * height
        self._first = _as_pixels(first, width, height, "first")
        self._second = _as_pixels(second, width, height, "second")
        self._max_allowed = settings.max_allowed_diff
        self._match_rgba = np.array([*settings.match_color, 255], dtype=np.uint8)
        self._diff_rgba = np.array([*settings.diff_color, 255], dtype=np.uint8)
        self._diff_map: Optional[np.ndarray] = np.empty((self.total_pixels, CHANNELS), dtype=np.uint8)
        self.processed = 0
        self.matching = 0
        self.state = RunState.IDLE

    @property
    def done(self) -> bool:
        return self.processed >= self.total_pixels

    def step(self) -> ProgressEvent:
        """Classify the next batch of pixels and return its progress event."""

        if self.state in (RunState.COMPLETED, RunState.CANCELLED) or self.done:
            raise RuntimeError(f"Cannot step a comparison in state {self.state.value}")
        self.state = RunState.RUNNING

        start = self.processed
        end = min(start + self.batch_size, self.total_pixels)
        rgb_a = self._first[start:end, :3].astype(np.int16)
        rgb_b = self._second[start:end, :3].astype(np.int16)
        delta = np.abs(rgb_a - rgb_b).sum(axis=1)
        matched = delta <= self._max_allowed

        self._diff_map[start:end] = np.where(matched[:, None], self._match_rgba, self._diff_rgba)
        self.matching += int(np.count_nonzero(matched))
        self.processed = end
        return make_event(self.processed, self.total_pixels, self.matching, self.width)

    def cancel(self) -> None:
        """Drop all partial work; the run cannot be resumed."""

        self._diff_map = None
        self.state = RunState.CANCELLED

    def finish(self) -> Tuple[ComparisonResult, DiffMap]:
        if not self.done or self.state is RunState.CANCELLED:
            raise RuntimeError("Comparison has not processed every pixel")
        self.state = RunState.COMPLETED
        result = ComparisonResult(
            total_pixels=self.total_pixels,
            matching_pixels=self.matching,
            different_pixels=self.total_pixels - self.matching,
            similarity=self.matching / self.total_pixels * 100,
        )
        diff_map = DiffMap(self.width, self.height, self._diff_map.tobytes())
        return result, diff_map


def compare_pixels(
    width: int,
    height: int,
    first: PixelData,
    second: PixelData,
    settings: ComparisonSettings,
    progress: Optional[ProgressSink] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    yield_control: Optional[Callable[[], None]] = None,
) -> Comparison:
    """Run a comparator to completion.

    After every batch the cancel token is checked before anything else; when
    it is set :class:`ComparisonCancelled` is raised and no final progress
    event is published. ``yield_control`` is called between batches so an
    embedding application can stay responsive.
    """

    comparator = PixelComparator(width, height, first, second, settings, batch_size=batch_size)
    while not comparator.done:
        event = comparator.step()
        if cancel_token is not None and cancel_token.cancelled:
            comparator.cancel()
            raise ComparisonCancelled(
                f"Comparison cancelled after {event.processed} of {comparator.total_pixels} pixels"
            )
        if progress is not None:
            progress(event)
        if not comparator.done and yield_control is not None:
            yield_control()

    result, diff_map = comparator.finish()
    return Comparison(result=result, diff_map=diff_map)


def compare_images(
    image1: ImageBuffer,
    image2: ImageBuffer,
    settings: Optional[ComparisonSettings] = None,
    progress: Optional[ProgressSink] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    batch_size: Optional[int] = None,
    yield_control: Optional[Callable[[], None]] = None,
) -> Comparison:
    """Compare the configured region of two decoded images."""

    for label, image in (("first", image1), ("second", image2)):
        if not isinstance(image, ImageBuffer):
            raise InputImageError(f"The {label} image is missing or has not been decoded")
    settings = settings or ComparisonSettings()

    started = time.perf_counter()
    logger.info(
        "Comparing %dx%d against %dx%d (threshold=%d%%, sizing=%s)",
        image1.width,
        image1.height,
        image2.width,
        image2.height,
        settings.threshold,
        settings.sizing.value,
    )
    pair = extract_regions(image1, image2, settings)
    try:
        comparison = compare_pixels(
            pair.width,
            pair.height,
            pair.first,
            pair.second,
            settings,
            progress,
            cancel_token,
            batch_size=DEFAULT_BATCH_SIZE if batch_size is None else batch_size,
            yield_control=yield_control,
        )
    except ComparisonCancelled:
        logger.info("Comparison was cancelled by the user.")
        raise

    elapsed_ms = round((time.perf_counter() - started) * 1000)
    comparison = replace(comparison, elapsed_ms=elapsed_ms, region_set=not settings.region.is_full())
    logger.info(
        "Similarity %.2f%% over %d pixels (%d different) in %d ms",
        comparison.result.similarity,
        comparison.result.total_pixels,
        comparison.result.different_pixels,
        elapsed_ms,
    )
    return comparison


def _as_pixels(data: PixelData, width: int, height: int, label: str) -> np.ndarray:
    expected = width * height * CHANNELS
    if isinstance(data, np.ndarray):
        array = np.ascontiguousarray(data, dtype=np.uint8)
    else:
        array = np.frombuffer(data, dtype=np.uint8)
    if array.size != expected:
        raise InputImageError(
            f"The {label} region buffer holds {array.size} bytes, expected {expected}"
        )
    return array.reshape(width * height, CHANNELS)
