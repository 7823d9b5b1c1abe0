import json

import numpy as np
import pytest

from pixelcompare.core.types import Comparison, ComparisonResult, DiffMap, ImageBuffer
from pixelcompare.errors import InputImageError
from pixelcompare.metadata import ImageFileInfo, compare_metadata
from pixelcompare.presets import ComparisonSettings
from pixelcompare.report import comparison_to_dict, comparison_to_json, write_json_report


def _comparison():
    result = ComparisonResult(total_pixels=4, matching_pixels=3, different_pixels=1, similarity=75.0)
    diff_map = DiffMap(2, 2, bytes(16))
    return Comparison(result=result, diff_map=diff_map, elapsed_ms=12)


def test_comparison_to_dict():
    data = comparison_to_dict(_comparison(), settings=ComparisonSettings())

    assert data["result"]["similarity"] == 75.0
    assert data["dimensions"] == {"width": 2, "height": 2, "label": "2 × 2"}
    assert data["processing_time_ms"] == 12
    assert data["settings"]["match_color"] == "#1f1f3d"
    assert "metadata" not in data


def test_write_json_report(tmp_path):
    info = ImageFileInfo("a.png", "image/png", 10, 2, 2)
    path = tmp_path / "nested" / "report.json"

    write_json_report(_comparison(), path, metadata=compare_metadata(info, info))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"][0] == {"property": "File Name", "image1": "a.png", "image2": "a.png", "same": True}
    assert json.loads(comparison_to_json(_comparison()))["result"]["total_pixels"] == 4


def test_comparison_to_json_includes_settings():
    data = json.loads(comparison_to_json(_comparison(), settings=ComparisonSettings(threshold=3)))
    assert data["settings"]["threshold"] == 3
    assert "metadata" not in data
    with pytest.raises(TypeError):
        comparison_to_json(_comparison(), ComparisonSettings())


def test_image_buffer_validates_length():
    with pytest.raises(InputImageError):
        ImageBuffer(2, 2, bytes(15))
    with pytest.raises(InputImageError):
        ImageBuffer(0, 2, b"")
    with pytest.raises(InputImageError):
        ImageBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
