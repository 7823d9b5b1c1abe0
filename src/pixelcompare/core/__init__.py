"""Value types shared by the region extractor and the pixel comparator."""

from .types import Comparison, ComparisonResult, DiffMap, ImageBuffer, ProgressEvent

__all__ = [
    "Comparison",
    "ComparisonResult",
    "DiffMap",
    "ImageBuffer",
    "ProgressEvent",
]
