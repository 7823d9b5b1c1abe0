"""Region-restricted pixel similarity between two raster images."""

from __future__ import annotations

from .compare import DEFAULT_BATCH_SIZE, PixelComparator, RunState, compare_images, compare_pixels
from .core.types import Comparison, ComparisonResult, DiffMap, ImageBuffer, ProgressEvent
from .errors import (
    ComparisonCancelled,
    InputImageError,
    InvalidRegionError,
    InvalidSettingsError,
    PixelCompareError,
)
from .presets import ComparisonSettings, Region, SizingPolicy, get_preset, iter_presets
from .progress import CancelToken
from .region import RegionPair, extract_regions

__all__ = [
    "compare_images",
    "compare_pixels",
    "extract_regions",
    "PixelComparator",
    "RunState",
    "DEFAULT_BATCH_SIZE",
    "CancelToken",
    "Comparison",
    "ComparisonResult",
    "DiffMap",
    "ImageBuffer",
    "ProgressEvent",
    "RegionPair",
    "ComparisonSettings",
    "Region",
    "SizingPolicy",
    "get_preset",
    "iter_presets",
    "PixelCompareError",
    "InvalidRegionError",
    "ComparisonCancelled",
    "InputImageError",
    "InvalidSettingsError",
]

__version__ = "0.1.0"
