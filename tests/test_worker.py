import numpy as np
import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import QCoreApplication

from pixelcompare.core.types import ImageBuffer
from pixelcompare.presets import ComparisonSettings, Region
from pixelcompare.ui.worker import ComparisonThread


@pytest.fixture(autouse=True)
def _app():
    return QCoreApplication.instance() or QCoreApplication([])


def _image(value):
    pixels = np.full((40, 50, 4), value, dtype=np.uint8)
    pixels[..., 3] = 255
    return ImageBuffer.from_array(pixels)


def _collect(thread):
    progress, finished = [], []
    thread.progress.connect(progress.append)
    thread.finished.connect(lambda status, payload: finished.append((status, payload)))
    return progress, finished


def test_thread_reports_success():
    thread = ComparisonThread(_image(10), _image(10), ComparisonSettings(), batch_size=500)
    progress, finished = _collect(thread)

    thread.run()

    assert progress == pytest.approx([25.0, 50.0, 75.0, 100.0])
    status, comparison = finished[0]
    assert status == "success"
    assert comparison.result.similarity == pytest.approx(100.0)


def test_thread_cancelled():
    thread = ComparisonThread(_image(10), _image(10), ComparisonSettings(), batch_size=500)
    progress, finished = _collect(thread)

    thread.cancel()
    thread.run()

    assert thread.is_cancelled()
    assert progress == []
    assert finished == [("cancelled", None)]


def test_thread_reports_invalid_region():
    settings = ComparisonSettings(region=Region(10, 10, 10, 10))
    thread = ComparisonThread(_image(10), _image(10), settings)
    _, finished = _collect(thread)

    thread.run()

    status, message = finished[0]
    assert status == "error"
    assert "zero area" in message


def test_thread_reports_unexpected_failure(monkeypatch):
    from pixelcompare.ui import worker

    def broken_compare(*args, **kwargs):
        raise MemoryError("canvas too large")

    monkeypatch.setattr(worker, "compare_images", broken_compare)
    thread = ComparisonThread(_image(10), _image(10), ComparisonSettings())
    progress, finished = _collect(thread)

    thread.run()

    assert progress == []
    assert finished == [("error", "canvas too large")]
