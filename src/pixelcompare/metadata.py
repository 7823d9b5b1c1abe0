"""Side-by-side file metadata shown next to a comparison."""
from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .core.types import ImageBuffer

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclass(frozen=True)
class ImageFileInfo:
    name: str
    mime_type: str
    size_bytes: int
    width: int
    height: int

    @property
    def dimensions(self) -> str:
        return f"{self.width} × {self.height}"


@dataclass(frozen=True)
class MetadataRow:
    label: str
    first: str
    second: str
    same: bool
    delta: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "property": self.label,
            "image1": self.first,
            "image2": self.second,
            "same": self.same,
        }
        if self.delta is not None:
            data["delta"] = self.delta
        return data


def describe_file(path: str | Path, image: ImageBuffer) -> ImageFileInfo:
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    return ImageFileInfo(
        name=path.name,
        mime_type=mime_type or "application/octet-stream",
        size_bytes=os.path.getsize(path),
        width=image.width,
        height=image.height,
    )


def compare_metadata(first: ImageFileInfo, second: ImageFileInfo) -> List[MetadataRow]:
    same_size = first.size_bytes == second.size_bytes
    return [
        MetadataRow("File Name", first.name, second.name, first.name == second.name),
        MetadataRow("File Type", first.mime_type, second.mime_type, first.mime_type == second.mime_type),
        MetadataRow(
            "File Size",
            format_file_size(first.size_bytes),
            format_file_size(second.size_bytes),
            same_size,
            None if same_size else format_file_size(abs(first.size_bytes - second.size_bytes)),
        ),
        MetadataRow(
            "Dimensions",
            first.dimensions,
            second.dimensions,
            (first.width, first.height) == (second.width, second.height),
        ),
    ]


def format_file_size(size: int) -> str:
    """Format ``size`` bytes with base-1024 units, e.g. ``1.5 KB``."""
    if size == 0:
        return "0 Bytes"
    index = 0
    value = float(size)
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    value = round(value, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"
