"""Comparison settings, tolerance presets and color helpers."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from .errors import InvalidSettingsError

Color = Tuple[int, int, int]
ColorLike = Union[str, Color]

DEFAULT_THRESHOLD = 15
DEFAULT_DIFF_COLOR = "#ffffff"
DEFAULT_MATCH_COLOR = "#1F1F3D"


class SizingPolicy(enum.Enum):
    """How an image is placed on the shared comparison canvas."""

    NO_SCALE = "no_scale"
    FIT_SCALE = "fit_scale"

    @classmethod
    def from_flag(cls, average_out_size: bool) -> "SizingPolicy":
        return cls.FIT_SCALE if average_out_size else cls.NO_SCALE


@dataclass(frozen=True)
class Region:
    """Percentage rectangle on the shared canvas.

    The corners may be given in any order; :meth:`normalized` always yields
    ``(left, top, width, height)`` with non-negative extents.
    """

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 100.0
    y2: float = 100.0

    def normalized(self) -> Tuple[float, float, float, float]:
        return (
            min(self.x1, self.x2),
            min(self.y1, self.y2),
            abs(self.x2 - self.x1),
            abs(self.y2 - self.y1),
        )

    def is_full(self) -> bool:
        return (self.x1, self.y1, self.x2, self.y2) == (0, 0, 100, 100)

    def swapped(self) -> "Region":
        return Region(self.x2, self.y2, self.x1, self.y1)

    def to_dict(self) -> Dict[str, float]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}

    @classmethod
    def parse(cls, value: str) -> "Region":
        parts = [p.strip() for p in value.replace(";", ",").split(",")]
        if len(parts) != 4:
            raise ValueError(f"Region '{value}' must have four comma separated percentages")
        try:
            x1, y1, x2, y2 = (float(p) for p in parts)
        except ValueError as exc:
            raise ValueError(f"Region '{value}' has invalid coordinates") from exc
        return cls(x1, y1, x2, y2)


@dataclass(frozen=True)
class ColorScheme:
    """RGB colors painted into the diff map."""

    diff: Color = (255, 255, 255)
    match: Color = (31, 31, 61)

    def with_overrides(
        self,
        *,
        diff: Optional[Color] = None,
        match: Optional[Color] = None,
    ) -> "ColorScheme":
        return ColorScheme(diff=diff or self.diff, match=match or self.match)

    def to_dict(self) -> Dict[str, str]:
        return {"diff": format_color(self.diff), "match": format_color(self.match)}


@dataclass(frozen=True)
class ComparisonSettings:
    """Immutable settings for a single comparison run.

    Colors may be passed as hex strings; they are parsed once here so an
    invalid value fails before any pixel is touched.
    """

    threshold: int = DEFAULT_THRESHOLD
    diff_color: ColorLike = DEFAULT_DIFF_COLOR
    match_color: ColorLike = DEFAULT_MATCH_COLOR
    sizing: SizingPolicy = SizingPolicy.NO_SCALE
    region: Region = field(default_factory=Region)

    def __post_init__(self) -> None:
        threshold = self.threshold
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise InvalidSettingsError(f"Threshold must be an integer percent, got {threshold!r}")
        if not 0 <= threshold <= 100:
            raise InvalidSettingsError(f"Threshold must be between 0 and 100, got {threshold}")
        object.__setattr__(self, "diff_color", _accept_color("diff_color", self.diff_color))
        object.__setattr__(self, "match_color", _accept_color("match_color", self.match_color))
        if not isinstance(self.sizing, SizingPolicy):
            raise InvalidSettingsError(f"Unknown sizing policy {self.sizing!r}")
        if not isinstance(self.region, Region):
            raise InvalidSettingsError(f"Region must be a Region, got {type(self.region).__name__}")

    @property
    def max_allowed_diff(self) -> float:
        """Largest summed RGB delta still counted as a match."""
        return 765 * (self.threshold / 100)

    def to_dict(self) -> Dict[str, object]:
        return {
            "threshold": self.threshold,
            "diff_color": format_color(self.diff_color),  # type: ignore[arg-type]
            "match_color": format_color(self.match_color),  # type: ignore[arg-type]
            "sizing": self.sizing.value,
            "region": self.region.to_dict(),
        }

    def copy(self, **overrides: object) -> "ComparisonSettings":
        return replace(self, **overrides)


@dataclass(frozen=True)
class Preset:
    """Named tolerance level with its diff map palette."""

    name: str
    description: str
    threshold: int
    colors: ColorScheme

    def settings(self, **overrides: object) -> ComparisonSettings:
        values: Dict[str, object] = {
            "threshold": self.threshold,
            "diff_color": self.colors.diff,
            "match_color": self.colors.match,
        }
        values.update(overrides)
        return ComparisonSettings(**values)  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "threshold": self.threshold,
            "colors": self.colors.to_dict(),
        }


_DEFAULT_COLORS = ColorScheme()

PRESETS: Mapping[str, Preset] = {
    "exact": Preset(
        name="exact",
        description="Pixels must have identical RGB values.",
        threshold=0,
        colors=_DEFAULT_COLORS,
    ),
    "strict": Preset(
        name="strict",
        description="Tolerates compression noise only.",
        threshold=5,
        colors=_DEFAULT_COLORS,
    ),
    "balanced": Preset(
        name="balanced",
        description="Default tolerance for screenshots and exports.",
        threshold=DEFAULT_THRESHOLD,
        colors=_DEFAULT_COLORS,
    ),
    "loose": Preset(
        name="loose",
        description="Ignores small color shifts; flags structural changes.",
        threshold=30,
        colors=_DEFAULT_COLORS,
    ),
}


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()


def parse_color(value: Optional[str]) -> Optional[Color]:
    """Parse ``#RRGGBB``, ``RRGGBB`` or ``r,g,b`` into an RGB byte triple."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if "," in value or ";" in value:
        parts = value.replace(";", ",").split(",")
        if len(parts) != 3:
            raise ValueError("RGB colors must provide three comma separated numbers")
        try:
            rgb = tuple(int(p.strip()) for p in parts)
        except ValueError as exc:
            raise ValueError(f"Invalid RGB color '{value}'") from exc
        if any(not 0 <= channel <= 255 for channel in rgb):
            raise ValueError("RGB channels must be between 0 and 255")
        return rgb  # type: ignore[return-value]
    hex_value = value[1:] if value.startswith("#") else value
    if len(hex_value) != 6:
        raise ValueError("Hex colors must be #RRGGBB")
    try:
        return tuple(int(hex_value[i : i + 2], 16) for i in range(0, 6, 2))  # type: ignore[return-value]
    except ValueError as exc:
        raise ValueError(f"Invalid hex color '{value}'") from exc


def format_color(color: Color) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


def _accept_color(name: str, value: ColorLike) -> Color:
    if isinstance(value, str):
        try:
            parsed = parse_color(value)
        except ValueError as exc:
            raise InvalidSettingsError(f"{name}: {exc}") from exc
        if parsed is None:
            raise InvalidSettingsError(f"{name} must not be empty")
        return parsed
    try:
        rgb = tuple(int(channel) for channel in value)
    except (TypeError, ValueError) as exc:
        raise InvalidSettingsError(f"{name} must be a hex string or RGB triple") from exc
    if len(rgb) != 3 or any(not 0 <= channel <= 255 for channel in rgb):
        raise InvalidSettingsError(f"{name} must hold three channels between 0 and 255")
    return rgb  # type: ignore[return-value]
