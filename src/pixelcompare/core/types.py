from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import numpy as np

from ..errors import InputImageError

CHANNELS = 4


@dataclass(frozen=True)
class ImageBuffer:
    """Decoded RGBA image, row-major with a top-left origin."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.data is None:
            raise InputImageError("Image buffer has no pixel data")
        if self.width <= 0 or self.height <= 0:
            raise InputImageError(f"Invalid image dimensions: {self.width}x{self.height}")
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise InputImageError(
                f"Image buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "ImageBuffer":
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise InputImageError(f"Expected an (height, width, 4) array, got shape {pixels.shape}")
        height, width = pixels.shape[:2]
        return cls(width, height, np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())

    def as_array(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, CHANNELS)


@dataclass(frozen=True)
class DiffMap:
    width: int
    height: int
    data: bytes

    def as_array(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, CHANNELS)


@dataclass(frozen=True)
class ComparisonResult:
    total_pixels: int
    matching_pixels: int
    different_pixels: int
    similarity: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_pixels": self.total_pixels,
            "matching_pixels": self.matching_pixels,
            "different_pixels": self.different_pixels,
            "similarity": self.similarity,
        }


@dataclass(frozen=True)
class ProgressEvent:
    progress: float
    row: int
    col: int
    processed: int
    similarity: float


@dataclass(frozen=True)
class Comparison:
    """Outcome of a completed run: statistics plus the painted diff map."""

    result: ComparisonResult
    diff_map: DiffMap
    elapsed_ms: int = 0
    region_set: bool = False

    @property
    def dimensions_label(self) -> str:
        label = f"{self.diff_map.width} × {self.diff_map.height}"
        return f"{label} (Region)" if self.region_set else label
