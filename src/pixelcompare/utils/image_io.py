"""Decode image files into RGBA buffers and encode diff maps, via PyMuPDF."""
from __future__ import annotations

import logging
from pathlib import Path

import fitz
import numpy as np

from ..core.types import CHANNELS, DiffMap, ImageBuffer
from ..errors import InputImageError

logger = logging.getLogger(__name__)


def load_image(path: str | Path) -> ImageBuffer:
    """Decode ``path`` (PNG, JPEG, BMP, ...) into an RGBA :class:`ImageBuffer`."""

    path = Path(path)
    if not path.is_file():
        raise InputImageError(f"Image file not found: {path}")
    try:
        pix = fitz.Pixmap(str(path))
        return pixmap_to_buffer(pix)
    except InputImageError:
        raise
    except Exception as exc:
        raise InputImageError(f"Could not decode image {path}: {exc}") from exc


def pixmap_to_buffer(pix: fitz.Pixmap) -> ImageBuffer:
    if pix.width <= 0 or pix.height <= 0:
        raise InputImageError(f"Invalid image dimensions: {pix.width}x{pix.height}")
    if pix.colorspace is None or pix.colorspace.n != 3:
        pix = fitz.Pixmap(fitz.csRGB, pix)
    if not pix.alpha:
        pix = fitz.Pixmap(pix, 1)
    rows = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.stride)
    pixels = rows[:, : pix.width * CHANNELS].reshape(pix.height, pix.width, CHANNELS)
    logger.debug("Decoded %dx%d image", pix.width, pix.height)
    return ImageBuffer.from_array(pixels)


def save_diff_map(diff_map: DiffMap, path: str | Path) -> Path:
    """Write ``diff_map`` as an RGBA PNG and return the output path."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix = fitz.Pixmap(fitz.csRGB, diff_map.width, diff_map.height, diff_map.data, 1)
    pix.save(str(out_path))
    logger.info("Diff map written to %s", out_path)
    return out_path
