import numpy as np
import pytest

from pixelcompare.core.types import ImageBuffer
from pixelcompare.metadata import ImageFileInfo, compare_metadata, describe_file, format_file_size


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1048576, "1 MB"),
        (5 * 1024**3, "5 GB"),
        (1234567, "1.18 MB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_compare_metadata_rows():
    first = ImageFileInfo("a.png", "image/png", 2048, 100, 50)
    second = ImageFileInfo("b.png", "image/png", 1024, 100, 50)

    rows = {row.label: row for row in compare_metadata(first, second)}

    assert list(rows) == ["File Name", "File Type", "File Size", "Dimensions"]
    assert rows["File Name"].same is False
    assert rows["File Type"].same is True
    assert rows["File Size"].first == "2 KB"
    assert rows["File Size"].delta == "1 KB"
    assert rows["Dimensions"].first == "100 × 50"
    assert rows["Dimensions"].same is True


def test_same_size_has_no_delta():
    info = ImageFileInfo("a.png", "image/png", 10, 1, 1)
    size_row = compare_metadata(info, info)[2]
    assert size_row.same is True
    assert size_row.delta is None
    assert "delta" not in size_row.to_dict()


def test_describe_file(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"x" * 300)
    image = ImageBuffer.from_array(np.zeros((3, 4, 4), dtype=np.uint8))

    info = describe_file(path, image)

    assert info.name == "shot.png"
    assert info.mime_type == "image/png"
    assert info.size_bytes == 300
    assert info.dimensions == "4 × 3"
