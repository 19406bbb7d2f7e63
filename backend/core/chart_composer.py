"""
Injects query rows into the generated Vega-Lite spec and
applies sizing, tooltip and theme defaults.

Zero rows always render as a fixed "no data" text placeholder, never as an
empty chart of the requested type. Above LARGE_DATASET_THRESHOLD rows,
tooltips are switched off and a sampling transform is appended.
"""
import copy
import logging
from typing import Any, Optional

from models.chart import ChartOptions
from models.validation import ValidationResult
from prompts.chart_generation import VEGA_LITE_SCHEMA_URL

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 700
DEFAULT_HEIGHT = 400
LARGE_DATASET_THRESHOLD = 1000
SAMPLE_SIZE = 1000

VALID_MARKS = {"bar", "line", "point", "arc", "area", "rect", "rule", "text", "tick"}

THEMES: dict[str, dict[str, Any]] = {
    "dark": {
        "background": "#1e1e1e",
        "title": {"color": "#ffffff"},
        "axis": {
            "labelColor": "#cccccc",
            "titleColor": "#ffffff",
            "gridColor": "#444444",
            "domainColor": "#666666",
        },
        "legend": {"labelColor": "#cccccc", "titleColor": "#ffffff"},
    },
    "minimal": {
        "axis": {"grid": False, "domain": False},
        "view": {"stroke": "transparent"},
    },
    "professional": {
        "background": "white",
        "title": {"fontSize": 16, "fontWeight": 600, "color": "#1f2937"},
        "axis": {
            "labelFontSize": 12,
            "titleFontSize": 14,
            "labelColor": "#6b7280",
            "titleColor": "#374151",
            "gridColor": "#e5e7eb",
        },
    },
}

NO_DATA_MESSAGE = "No data matched this question. Try widening the filters or a different time range."


def mark_type(spec: dict[str, Any]) -> Optional[str]:
    mark = spec.get("mark")
    if isinstance(mark, dict):
        return mark.get("type")
    return mark


def validate_chart_spec(spec: dict[str, Any]) -> ValidationResult:
    """Structural check. $schema and encoding are required; the rest only warns."""
    result = ValidationResult()
    if not spec.get("$schema"):
        result.errors.append("Missing $schema field")
    if not spec.get("encoding"):
        result.errors.append("Missing encoding field")
    if not spec.get("mark"):
        result.warnings.append("Missing mark field")
    elif mark_type(spec) not in VALID_MARKS:
        result.warnings.append(f"Invalid mark type: {mark_type(spec)}")
    if "data" not in spec:
        result.warnings.append("Missing data field")
    return result


def build_empty_spec(message: str = NO_DATA_MESSAGE, description: Optional[str] = None) -> dict[str, Any]:
    """Placeholder rendered whenever a query returns zero rows."""
    return {
        "$schema": VEGA_LITE_SCHEMA_URL,
        "description": description or "No data available",
        "title": "No data available",
        "width": DEFAULT_WIDTH,
        "height": 120,
        "data": {"values": []},
        "mark": {"type": "text", "fontSize": 14, "color": "#6b7280", "tooltip": False},
        "encoding": {"text": {"value": message}},
    }


def _set_tooltip(spec: dict[str, Any], enabled: bool) -> None:
    mark = spec.get("mark")
    if not mark:
        return
    if isinstance(mark, str):
        spec["mark"] = {"type": mark, "tooltip": enabled}
    else:
        mark["tooltip"] = enabled


def optimize_for_size(spec: dict[str, Any], row_count: int) -> dict[str, Any]:
    """Large datasets: no per-point tooltips and a sampling transform near SAMPLE_SIZE."""
    optimized = copy.deepcopy(spec)
    if row_count <= LARGE_DATASET_THRESHOLD:
        return optimized
    _set_tooltip(optimized, False)
    optimized.setdefault("transform", []).append({"sample": SAMPLE_SIZE})
    logger.info("Large dataset (%d rows): tooltips off, sampling %d points", row_count, SAMPLE_SIZE)
    return optimized


def _overlay_theme(config: dict[str, Any], theme: dict[str, Any]) -> dict[str, Any]:
    """Theme keys win; nested blocks such as axis are merged one level deep."""
    merged = dict(config)
    for key, value in theme.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def compose_chart_spec(
    spec: dict[str, Any],
    rows: list[dict[str, Any]],
    options: Optional[ChartOptions] = None,
) -> dict[str, Any]:
    """Return an enhanced deep copy of spec with rows injected. The input is never mutated."""
    options = options or ChartOptions()
    if not rows:
        return build_empty_spec(description=spec.get("description"))

    enhanced = copy.deepcopy(spec)
    enhanced["data"] = {"values": rows}

    if options.responsive:
        enhanced["width"] = "container"
        enhanced["autosize"] = {"type": "fit", "contains": "padding"}
    else:
        enhanced.setdefault("width", DEFAULT_WIDTH)
    enhanced.setdefault("height", DEFAULT_HEIGHT)

    if options.tooltip:
        _set_tooltip(enhanced, True)

    if options.theme != "default":
        enhanced["config"] = _overlay_theme(enhanced.get("config") or {}, THEMES[options.theme])

    return optimize_for_size(enhanced, len(rows))
