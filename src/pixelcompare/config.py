"""Configuration helpers for pixelcompare.

Settings come from three layers: built-in defaults, an optional JSON settings
file and environment variables (a ``.env`` file is honoured through
python-dotenv). Nothing here ever writes settings back to disk.
"""
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .compare import DEFAULT_BATCH_SIZE
from .errors import InvalidSettingsError
from .presets import (
    DEFAULT_DIFF_COLOR,
    DEFAULT_MATCH_COLOR,
    DEFAULT_THRESHOLD,
    ComparisonSettings,
    Region,
    SizingPolicy,
)

logger = logging.getLogger(__name__)

ENV_SETTINGS_FILE = "PIXELCOMPARE_SETTINGS"
ENV_BATCH_SIZE = "PIXELCOMPARE_BATCH_SIZE"
ENV_LOG_LEVEL = "PIXELCOMPARE_LOG_LEVEL"

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})

# Keys follow the camelCase names used in exported settings files.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "threshold": DEFAULT_THRESHOLD,
    "averageOutSize": False,
    "diffColor": DEFAULT_DIFF_COLOR,
    "matchColor": DEFAULT_MATCH_COLOR,
    "region": {"x1": 0, "y1": 0, "x2": 100, "y2": 100},
}


def load_env() -> None:
    """Load configuration from a .env file if present."""
    load_dotenv()


def load_settings_file(path: Optional[str | Path]) -> Dict[str, Any]:
    """Return :data:`DEFAULT_SETTINGS` overlaid with the JSON object at ``path``.

    A missing file yields the defaults silently; an unreadable or malformed
    file is logged and also yields the defaults.
    """

    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if not path:
        return settings
    try:
        with open(path, "r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except FileNotFoundError:
        return settings
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to load settings from %s: %s", path, exc)
        return settings
    if not isinstance(loaded, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return settings
    settings.update(loaded)
    return settings


def settings_from_mapping(mapping: Mapping[str, Any]) -> ComparisonSettings:
    """Build validated :class:`ComparisonSettings` from a settings mapping."""

    merged = dict(DEFAULT_SETTINGS)
    merged.update(mapping)
    region = merged.get("region") or {}
    if not isinstance(region, Mapping):
        raise InvalidSettingsError(f"Region must be an object with x1, y1, x2, y2, got {region!r}")
    try:
        threshold = merged["threshold"]
        if isinstance(threshold, str):
            threshold = int(threshold, 10)
        elif isinstance(threshold, float) and threshold.is_integer():
            threshold = int(threshold)
        region_value = Region(
            float(region.get("x1", 0)),
            float(region.get("y1", 0)),
            float(region.get("x2", 100)),
            float(region.get("y2", 100)),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidSettingsError(f"Invalid settings value: {exc}") from exc
    return ComparisonSettings(
        threshold=threshold,
        diff_color=merged["diffColor"],
        match_color=merged["matchColor"],
        sizing=SizingPolicy.from_flag(_as_flag("averageOutSize", merged.get("averageOutSize", False))),
        region=region_value,
    )


def _as_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.strip().lower() in _TRUE_STRINGS
    raise InvalidSettingsError(f"{name} must be true or false, got {value!r}")


def load_settings(path: Optional[str | Path] = None) -> ComparisonSettings:
    """Load settings from ``path`` or the file named by ``PIXELCOMPARE_SETTINGS``."""

    path = path or os.getenv(ENV_SETTINGS_FILE)
    return settings_from_mapping(load_settings_file(path))


def batch_size_from_env(default: int = DEFAULT_BATCH_SIZE) -> int:
    value = os.getenv(ENV_BATCH_SIZE)
    if not value:
        return default
    try:
        size = int(value)
    except ValueError as exc:
        raise InvalidSettingsError(f"{ENV_BATCH_SIZE} must be an integer, got {value!r}") from exc
    if size < 1:
        raise InvalidSettingsError(f"{ENV_BATCH_SIZE} must be at least 1, got {size}")
    return size


def log_level_from_env(default: str = "INFO") -> str:
    return (os.getenv(ENV_LOG_LEVEL) or default).upper()
