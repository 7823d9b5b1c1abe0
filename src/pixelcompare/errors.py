"""Custom exceptions used across pixelcompare."""

__all__ = [
    "PixelCompareError",
    "InvalidRegionError",
    "ComparisonCancelled",
    "InputImageError",
    "InvalidSettingsError",
]


class PixelCompareError(Exception):
    """Base class for every error raised by the comparison engine."""

    pass


class InvalidRegionError(PixelCompareError):
    """Raised when the comparison region has zero or negative area."""

    pass


class ComparisonCancelled(PixelCompareError):
    """Raised when a running comparison observes its cancel token."""

    pass


class InputImageError(PixelCompareError, ValueError):
    """Raised when an image buffer is missing, malformed or undecodable."""

    pass


class InvalidSettingsError(PixelCompareError, ValueError):
    """Raised when comparison settings fail validation."""

    pass
