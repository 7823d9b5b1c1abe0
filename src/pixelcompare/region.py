"""Place two images on a shared canvas and cut out the same region of each.

Both images are drawn onto a transparent canvas sized to the larger width and
height of the pair, so the crops always share one pixel grid even when the
inputs differ in size.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from .core.types import CHANNELS, ImageBuffer
from .errors import InvalidRegionError
from .presets import ComparisonSettings, Region, SizingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionPair:
    first: np.ndarray
    second: np.ndarray
    width: int
    height: int


@dataclass(frozen=True)
class SourceRect:
    """Region rectangle in canvas pixels."""

    x: float
    y: float
    width: float
    height: float

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return _round_half_up(self.width), _round_half_up(self.height)


def canvas_size(image1: ImageBuffer, image2: ImageBuffer) -> Tuple[int, int]:
    return max(image1.width, image2.width), max(image1.height, image2.height)


def source_rect(region: Region, canvas_w: int, canvas_h: int) -> SourceRect:
    left, top, width, height = region.normalized()
    return SourceRect(
        x=left / 100 * canvas_w,
        y=top / 100 * canvas_h,
        width=width / 100 * canvas_w,
        height=height / 100 * canvas_h,
    )


def extract_regions(
    image1: ImageBuffer,
    image2: ImageBuffer,
    settings: ComparisonSettings,
) -> RegionPair:
    """Return equally shaped RGBA crops of the configured region of both images.

    Raises :class:`InvalidRegionError` when the rounded region is empty.
    """

    canvas_w, canvas_h = canvas_size(image1, image2)
    rect = source_rect(settings.region, canvas_w, canvas_h)
    width, height = rect.pixel_size
    if width <= 0 or height <= 0:
        raise InvalidRegionError(
            f"Comparison region has zero area ({width}x{height}). Adjust the region settings."
        )

    logger.debug(
        "Canvas %dx%d, region origin (%.2f, %.2f) size %dx%d, sizing=%s",
        canvas_w,
        canvas_h,
        rect.x,
        rect.y,
        width,
        height,
        settings.sizing.value,
    )

    x0, y0 = int(rect.x), int(rect.y)
    crops = []
    for image in (image1, image2):
        canvas = place_on_canvas(image.as_array(), canvas_w, canvas_h, settings.sizing)
        crops.append(_crop(canvas, x0, y0, width, height))
    return RegionPair(first=crops[0], second=crops[1], width=width, height=height)


def place_on_canvas(
    pixels: np.ndarray,
    canvas_w: int,
    canvas_h: int,
    sizing: SizingPolicy,
) -> np.ndarray:
    """Draw ``pixels`` centered on a transparent ``canvas_w`` x ``canvas_h`` canvas."""

    height, width = pixels.shape[:2]
    if sizing is SizingPolicy.FIT_SCALE and (width < canvas_w or height < canvas_h):
        aspect = width / height
        if aspect > canvas_w / canvas_h:
            draw_w = float(canvas_w)
            draw_h = draw_w / aspect
            dx = 0.0
            dy = (canvas_h - draw_h) / 2
        else:
            draw_h = float(canvas_h)
            draw_w = draw_h * aspect
            dy = 0.0
            dx = (canvas_w - draw_w) / 2
        return _warp(pixels, draw_w / width, draw_h / height, dx, dy, canvas_w, canvas_h)

    dx = (canvas_w - width) / 2
    dy = (canvas_h - height) / 2
    if dx.is_integer() and dy.is_integer():
        return _paste(pixels, int(dx), int(dy), canvas_w, canvas_h)
    return _warp(pixels, 1.0, 1.0, dx, dy, canvas_w, canvas_h)


def _paste(pixels: np.ndarray, dx: int, dy: int, canvas_w: int, canvas_h: int) -> np.ndarray:
    canvas = np.zeros((canvas_h, canvas_w, CHANNELS), dtype=np.uint8)
    height, width = pixels.shape[:2]
    x0, y0 = max(dx, 0), max(dy, 0)
    x1, y1 = min(dx + width, canvas_w), min(dy + height, canvas_h)
    if x1 > x0 and y1 > y0:
        canvas[y0:y1, x0:x1] = pixels[y0 - dy : y1 - dy, x0 - dx : x1 - dx]
    return canvas


def _warp(
    pixels: np.ndarray,
    scale_x: float,
    scale_y: float,
    dx: float,
    dy: float,
    canvas_w: int,
    canvas_h: int,
) -> np.ndarray:
    # OpenCV samples at integer pixel centers; shift by half a pixel so the
    # scaled image spans exactly [dx, dx + width * scale_x).
    matrix = np.array(
        [
            [scale_x, 0.0, dx + 0.5 * (scale_x - 1.0)],
            [0.0, scale_y, dy + 0.5 * (scale_y - 1.0)],
        ],
        dtype=np.float64,
    )
    warped = cv2.warpAffine(
        np.ascontiguousarray(pixels).copy(),
        matrix,
        (canvas_w, canvas_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_REPLICATE,
    )
    # Keep only canvas pixels whose centers fall inside the drawn rectangle.
    height, width = pixels.shape[:2]
    centers_x = np.arange(canvas_w) + 0.5
    centers_y = np.arange(canvas_h) + 0.5
    inside_x = (centers_x >= dx) & (centers_x < dx + width * scale_x)
    inside_y = (centers_y >= dy) & (centers_y < dy + height * scale_y)
    warped[~(inside_y[:, None] & inside_x[None, :])] = 0
    return warped


def _crop(canvas: np.ndarray, x0: int, y0: int, width: int, height: int) -> np.ndarray:
    """Cut a ``width`` x ``height`` window; area outside the canvas stays transparent."""

    out = np.zeros((height, width, CHANNELS), dtype=np.uint8)
    canvas_h, canvas_w = canvas.shape[:2]
    src_x0, src_y0 = max(x0, 0), max(y0, 0)
    src_x1, src_y1 = min(x0 + width, canvas_w), min(y0 + height, canvas_h)
    if src_x1 > src_x0 and src_y1 > src_y0:
        out[src_y0 - y0 : src_y1 - y0, src_x0 - x0 : src_x1 - x0] = canvas[src_y0:src_y1, src_x0:src_x1]
    return out


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
