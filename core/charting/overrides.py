"""Sparse override configuration for Highcharts rendering.

Editors attach a small JSON object to a chart to tweak its presentation, for
example `{"hideMarkers": true, "perSeriesOverrides": {"ice-extent": {"seriesType": "column"}}}`.
Every key is optional. Values are coerced from strings where that is
unambiguous; anything unusable is dropped with a warning so a typo never
breaks a published chart.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

logger = logging.getLogger(__name__)

TREND_LINE_COLOR: Final[str] = "#c00"
TREND_LINE_DASH_STYLE: Final[str] = "shortdot"

_HEX_COLOR: Final[re.Pattern[str]] = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class SeriesOverrides:
    """Overrides that apply to a single series.

    Args:
        series_type: Highcharts series type (`line`, `column`, `area`, ...).
        name: Legend name replacing the series label.
        hide_markers: Whether point markers are hidden on this series.
        order_index: Sort key for the series' position in the chart.
        connect_nulls: Whether the line bridges absent values.
        color: Validated hex color (`#rgb` or `#rrggbb`).
        dash_style: Highcharts dash style name.
        line_thickness: Line width in pixels.
        marker_radius: Point marker radius in pixels.
        trend_line: Render as a trend line (red dotted, no markers).
    """

    series_type: str | None = None
    name: str | None = None
    hide_markers: bool | None = None
    order_index: int | None = None
    connect_nulls: bool | None = None
    color: str | None = None
    dash_style: str | None = None
    line_thickness: int | None = None
    marker_radius: int | None = None
    trend_line: bool = False


@dataclass(frozen=True, slots=True)
class ChartOverrides:
    """Chart-wide overrides plus per-series overrides keyed by series id."""

    series_type: str | None = None
    name: str | None = None
    x_axis_label_step: int | None = None
    x_axis_label_rotation: int | None = None
    max_stagger_lines: int | None = None
    hide_markers: bool = False
    chart_type: str | None = None
    stacking: str | None = None
    x_axis_on_top: bool = False
    y_axis_min: int | None = None
    integer_values: bool | None = None
    connect_nulls: bool = False
    credit_text: str | None = None
    credit_uri: str | None = None
    enforce_equal_steps: bool = False
    per_series: Mapping[str, SeriesOverrides] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the per-series mapping."""

        object.__setattr__(self, "per_series", MappingProxyType(dict(self.per_series)))

    def for_series(self, series_id: str) -> SeriesOverrides | None:
        return self.per_series.get(series_id)

    @property
    def has_credits(self) -> bool:
        return bool(self.credit_text and self.credit_uri)


def _coerce_bool(raw: Any, *, key: str) -> bool | None:
    if raw is None or isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    logger.warning("Ignoring override %s=%r: expected a boolean.", key, raw)
    return None


def _coerce_int(raw: Any, *, key: str) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    logger.warning("Ignoring override %s=%r: expected an integer.", key, raw)
    return None


def _coerce_str(raw: Any, *, key: str) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw.strip() or None
    logger.warning("Ignoring override %s=%r: expected a string.", key, raw)
    return None


def normalize_color(raw: str | None) -> str | None:
    """Return `raw` as a `#`-prefixed 3 or 6 digit hex color, or None if invalid."""

    if raw is None:
        return None
    candidate = raw.strip()
    if not candidate.startswith("#"):
        candidate = f"#{candidate}"
    if _HEX_COLOR.match(candidate):
        return candidate
    logger.warning("Ignoring invalid series color %r.", raw)
    return None


def _parse_series_overrides(raw: Mapping[str, Any], *, series_id: str) -> SeriesOverrides:
    def key(name: str) -> str:
        return f"perSeriesOverrides.{series_id}.{name}"

    return SeriesOverrides(
        series_type=_coerce_str(raw.get("seriesType"), key=key("seriesType")),
        name=_coerce_str(raw.get("name"), key=key("name")),
        hide_markers=_coerce_bool(raw.get("hideMarkers"), key=key("hideMarkers")),
        order_index=_coerce_int(raw.get("orderIndex"), key=key("orderIndex")),
        connect_nulls=_coerce_bool(raw.get("connectNulls"), key=key("connectNulls")),
        color=normalize_color(_coerce_str(raw.get("color"), key=key("color"))),
        dash_style=_coerce_str(raw.get("dashStyle"), key=key("dashStyle")),
        line_thickness=_coerce_int(raw.get("lineThickness"), key=key("lineThickness")),
        marker_radius=_coerce_int(raw.get("markerRadius"), key=key("markerRadius")),
        trend_line=bool(_coerce_bool(raw.get("trendLine"), key=key("trendLine"))),
    )


def _parse_per_series(raw: Any) -> dict[str, SeriesOverrides]:
    """Read per-series overrides as `{id: {...}}` or as `[{"id": ..., ...}]`."""

    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = [(entry.get("id"), entry) for entry in raw if isinstance(entry, Mapping)]
    else:
        logger.warning("Ignoring perSeriesOverrides=%r: expected an object.", raw)
        return {}

    per_series: dict[str, SeriesOverrides] = {}
    for series_id, entry in items:
        if not isinstance(series_id, str) or not isinstance(entry, Mapping):
            logger.warning("Ignoring per-series override %r.", entry)
            continue
        per_series[series_id] = _parse_series_overrides(entry, series_id=series_id)
    return per_series


def parse_overrides(raw: Mapping[str, Any] | str | None) -> ChartOverrides:
    """Build ChartOverrides from a decoded object or a JSON string.

    Args:
        raw: Sparse override object, its JSON text, or None.

    Returns:
        ChartOverrides; defaults for anything missing or unusable.
    """

    if raw is None:
        return ChartOverrides()
    if isinstance(raw, str):
        if not raw.strip():
            return ChartOverrides()
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring chart overrides: invalid JSON.")
            return ChartOverrides()
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring chart overrides %r: expected an object.", raw)
        return ChartOverrides()

    credit_text = _coerce_str(raw.get("creditText"), key="creditText")
    credit_uri = _coerce_str(raw.get("creditUri"), key="creditUri")
    if bool(credit_text) != bool(credit_uri):
        logger.warning("Ignoring chart credits: creditText and creditUri must both be set.")
        credit_text = credit_uri = None

    return ChartOverrides(
        series_type=_coerce_str(raw.get("seriesType"), key="seriesType"),
        name=_coerce_str(raw.get("name"), key="name"),
        x_axis_label_step=_coerce_int(raw.get("xAxisLabelStep"), key="xAxisLabelStep"),
        x_axis_label_rotation=_coerce_int(raw.get("xAxisLabelRotation"), key="xAxisLabelRotation"),
        max_stagger_lines=_coerce_int(raw.get("maxStaggerLines"), key="maxStaggerLines"),
        hide_markers=bool(_coerce_bool(raw.get("hideMarkers"), key="hideMarkers")),
        chart_type=_coerce_str(raw.get("chartType"), key="chartType"),
        stacking=_coerce_str(raw.get("stacking"), key="stacking"),
        x_axis_on_top=bool(_coerce_bool(raw.get("xAxisOnTop"), key="xAxisOnTop")),
        y_axis_min=_coerce_int(raw.get("yAxisMin"), key="yAxisMin"),
        integer_values=_coerce_bool(raw.get("integerValues"), key="integerValues"),
        connect_nulls=bool(_coerce_bool(raw.get("connectNulls"), key="connectNulls")),
        credit_text=credit_text,
        credit_uri=credit_uri,
        enforce_equal_steps=bool(_coerce_bool(raw.get("enforceEqualSteps"), key="enforceEqualSteps")),
        per_series=_parse_per_series(raw.get("perSeriesOverrides")),
    )
