"""Utility functions used across the project."""

from .image_io import load_image, pixmap_to_buffer, save_diff_map

__all__ = [
    "load_image",
    "pixmap_to_buffer",
    "save_diff_map",
]
