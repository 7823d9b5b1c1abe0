"""JSON report helpers."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from .core.types import Comparison
from .metadata import MetadataRow
from .presets import ComparisonSettings


def comparison_to_dict(
    comparison: Comparison,
    *,
    settings: Optional[ComparisonSettings] = None,
    metadata: Optional[Iterable[MetadataRow]] = None,
) -> Dict[str, object]:
    data: Dict[str, object] = {
        "result": comparison.result.to_dict(),
        "dimensions": {
            "width": comparison.diff_map.width,
            "height": comparison.diff_map.height,
            "label": comparison.dimensions_label,
        },
        "processing_time_ms": comparison.elapsed_ms,
    }
    if settings is not None:
        data["settings"] = settings.to_dict()
    if metadata is not None:
        data["metadata"] = [row.to_dict() for row in metadata]
    return data


def write_json_report(
    comparison: Comparison,
    path: str | Path,
    *,
    settings: Optional[ComparisonSettings] = None,
    metadata: Optional[Iterable[MetadataRow]] = None,
) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    data = comparison_to_dict(comparison, settings=settings, metadata=metadata)
    with out_path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, ensure_ascii=False, indent=2)


def comparison_to_json(
    comparison: Comparison,
    *,
    settings: Optional[ComparisonSettings] = None,
    metadata: Optional[Iterable[MetadataRow]] = None,
) -> str:
    data = comparison_to_dict(comparison, settings=settings, metadata=metadata)
    return json.dumps(data, ensure_ascii=False, indent=2)
