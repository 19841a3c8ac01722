"""Highcharts configuration for aligned time-series collections.

`ChartSerializer` turns a TimeSeriesCollection plus optional ChartOverrides
into the options object passed to `Highcharts.chart(...)`. The output is
strict JSON: behavior that Highcharts expects as a JavaScript function is
emitted as a named token and bound by `core/static/core/charts.js`.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Final

from django.utils import translation
from django.utils.html import escape

from core.markers import django_language
from timeseries.collection import TimeSeriesCollection
from timeseries.points import chart_number
from timeseries.series import TimeSeries

from .overrides import TREND_LINE_COLOR, TREND_LINE_DASH_STYLE, ChartOverrides

logger = logging.getLogger(__name__)

DEFAULT_SERIES_TYPE: Final[str] = "line"
ERRORBAR_SERIES_TYPE: Final[str] = "errorbar"
LEGEND_CLICK_DISABLED: Final[str] = "disable"
MARKERS_PER_LABEL: Final[int] = 8


@dataclass(frozen=True, slots=True)
class ResolvedSeriesOptions:
    """Presentation options for one series after applying override precedence.

    Per-series overrides win over chart-wide overrides, which win over the
    defaults. `hide_markers` is None when no override mentions markers.
    """

    name: str
    series_type: str
    hide_markers: bool | None
    connect_nulls: bool
    color: str | None
    dash_style: str | None
    line_width: int | None
    marker_radius: int | None


def resolve_series_options(series: TimeSeries, overrides: ChartOverrides) -> ResolvedSeriesOptions:
    """Merge chart-wide and per-series overrides for `series`."""

    own = overrides.for_series(series.id)
    name = series.label
    series_type = overrides.series_type or DEFAULT_SERIES_TYPE
    hide_markers: bool | None = True if overrides.hide_markers else None
    connect_nulls = overrides.connect_nulls
    color = dash_style = None
    line_width = marker_radius = None

    if overrides.name:
        name = overrides.name
    if own is not None:
        if own.trend_line:
            color = TREND_LINE_COLOR
            dash_style = TREND_LINE_DASH_STYLE
            connect_nulls = True
            hide_markers = True
        name = own.name or name
        series_type = own.series_type or series_type
        if own.hide_markers is not None:
            hide_markers = own.hide_markers
        if own.connect_nulls is not None:
            connect_nulls = own.connect_nulls
        color = own.color or color
        dash_style = own.dash_style or dash_style
        line_width = own.line_thickness
        marker_radius = own.marker_radius

    return ResolvedSeriesOptions(
        name=name,
        series_type=series_type,
        hide_markers=hide_markers,
        connect_nulls=connect_nulls,
        color=color,
        dash_style=dash_style,
        line_width=line_width,
        marker_radius=marker_radius,
    )


def _point_format(unit_symbol: str) -> str:
    suffix = f" {escape(unit_symbol)}" if unit_symbol else ""
    return f'<span style="color:{{series.color}}">●</span> {{series.name}}: <b>{{point.y}}{suffix}</b><br/>'


def _errorbar_point_format(unit_symbol: str) -> str:
    suffix = f" {escape(unit_symbol)}" if unit_symbol else ""
    return f"(range: {{point.low}}-{{point.high}}{suffix})<br/>"


class ChartSerializer:
    """Serialize a TimeSeriesCollection into a Highcharts options object.

    Args:
        collection: Aligned series to plot.
        overrides: Optional presentation overrides.
    """

    def __init__(self, collection: TimeSeriesCollection, overrides: ChartOverrides | None = None) -> None:
        self.collection = collection
        self.overrides = overrides or ChartOverrides()

    def chart_config(self) -> dict[str, Any] | None:
        """Return the options object, or None when the chart cannot be built.

        A failure inside one series drops that series only; any other failure
        is logged and yields None.
        """

        try:
            return self._build_config()
        except Exception:
            logger.exception("Failed to build chart configuration for %r.", self.collection.title)
            return None

    def chart_config_string(self) -> str | None:
        """Return the options object as a JSON string, or None on failure."""

        config = self.chart_config()
        if config is None:
            return None
        try:
            return json.dumps(config, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError):
            logger.exception("Failed to encode chart configuration for %r.", self.collection.title)
            return None

    def ordered_collection(self) -> TimeSeriesCollection:
        """Return the collection re-ordered by per-series `orderIndex` overrides.

        Series without an order index keep their relative order ahead of the
        indexed ones.
        """

        indexed: list[tuple[int, int, str]] = []
        unindexed: list[str] = []
        for position, member in enumerate(self.collection.series):
            own = self.overrides.for_series(member.id)
            if own is None or own.order_index is None:
                unindexed.append(member.id)
            else:
                indexed.append((own.order_index, position, member.id))
        if not indexed:
            return self.collection
        ordered_ids = unindexed + [series_id for _, _, series_id in sorted(indexed)]
        return self.collection.with_order(ordered_ids)

    def _build_config(self) -> dict[str, Any]:
        collection = self.ordered_collection()
        if self.overrides.enforce_equal_steps:
            collection = collection.with_filled_years()
        markers = collection.time_markers

        config: dict[str, Any] = {"chart": self._chart_options()}
        config["title"] = {"text": collection.title}
        plot_series = self._plot_series_options(collection)
        if plot_series:
            config["plotOptions"] = {"series": plot_series}
        config["credits"] = self._credits()
        config["xAxis"] = [self._x_axis(markers)]
        config["yAxis"] = self._y_axes(collection)
        config["tooltip"] = {"shared": True}
        config["series"] = self._series_blocks(collection)
        return config

    def _chart_options(self) -> dict[str, Any]:
        if self.overrides.chart_type:
            return {"type": self.overrides.chart_type}
        return {"zoomType": "x"}

    def _plot_series_options(self, collection: TimeSeriesCollection) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.overrides.hide_markers:
            options["marker"] = {"enabled": False}
        if len(collection) == 1:
            options["events"] = {"legendItemClick": LEGEND_CLICK_DISABLED}
        if self.overrides.stacking:
            options["stacking"] = self.overrides.stacking
        return options

    def _credits(self) -> dict[str, Any]:
        if self.overrides.has_credits:
            return {"text": self.overrides.credit_text, "href": self.overrides.credit_uri}
        return {"enabled": False}

    def _x_axis(self, markers: tuple[str, ...]) -> dict[str, Any]:
        step = self.overrides.x_axis_label_step
        if step is None or step < 1:
            step = max(1, math.ceil(len(markers) / MARKERS_PER_LABEL))
        labels: dict[str, Any] = {"step": step}
        rotation = self.overrides.x_axis_label_rotation
        if rotation:
            labels["rotation"] = rotation
        stagger = self.overrides.max_stagger_lines
        if stagger is not None and stagger > 0:
            labels["maxStaggerLines"] = stagger

        axis: dict[str, Any] = {"categories": list(markers), "labels": labels}
        if self.overrides.x_axis_on_top:
            axis["opposite"] = True
        return axis

    def _y_axes(self, collection: TimeSeriesCollection) -> list[dict[str, Any]]:
        axes: list[dict[str, Any]] = []
        for index, unit in enumerate(collection.axis_units):
            tick_format = f"{{value}} {unit.short_form}" if unit.has_short_form else "{value}"
            axis: dict[str, Any] = {
                "labels": {"format": tick_format},
                "title": {"text": unit.long_form},
            }
            if index > 0:
                axis["opposite"] = True

            integer_only = self.overrides.integer_values
            if integer_only is None:
                integer_only = all(member.integer_values_only for member in collection.series_with_unit(unit))
            if integer_only:
                axis["allowDecimals"] = False
            if self.overrides.y_axis_min is not None:
                axis["min"] = self.overrides.y_axis_min
            if self.overrides.x_axis_on_top:
                axis["reversed"] = True
            axes.append(axis)
        return axes

    def _series_blocks(self, collection: TimeSeriesCollection) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        for index, member in enumerate(collection.series):
            try:
                blocks.extend(self._blocks_for_series(collection, index, member))
            except Exception:
                logger.exception(
                    "Dropping time series %s from chart %r.",
                    member.id,
                    collection.title,
                )
        return blocks

    def _blocks_for_series(
        self,
        collection: TimeSeriesCollection,
        index: int,
        member: TimeSeries,
    ) -> list[dict[str, Any]]:
        options = resolve_series_options(member, self.overrides)
        axis_index = collection.axis_index_for(member)
        if axis_index is None:
            logger.warning(
                "Time series %s uses unit %r which has no y-axis; plotting it on the first axis.",
                member.id,
                member.unit.short_form,
            )
            axis_index = 0

        block: dict[str, Any] = {
            "name": options.name,
            "id": member.id,
            "type": options.series_type,
            "yAxis": axis_index,
        }
        if options.connect_nulls:
            block["connectNulls"] = True
        marker: dict[str, Any] = {}
        if options.hide_markers is not None:
            marker["enabled"] = not options.hide_markers
        if options.marker_radius is not None:
            marker["radius"] = options.marker_radius
        if marker:
            block["marker"] = marker
        if options.color:
            block["color"] = options.color
        if options.dash_style:
            block["dashStyle"] = options.dash_style
        if options.line_width is not None:
            block["lineWidth"] = options.line_width
        block["data"] = [chart_number(value) for value in collection.values_for_series(index)]
        block["tooltip"] = {"pointFormat": _point_format(member.unit.short_form)}

        blocks = [block]
        if member.is_error_band:
            with translation.override(django_language(collection.language)):
                error_label = translation.gettext("error")
            blocks.append(
                {
                    "name": f"{options.name} {error_label}",
                    "id": f"{member.id}-error",
                    "type": ERRORBAR_SERIES_TYPE,
                    "yAxis": axis_index,
                    "linkedTo": member.id,
                    "data": [
                        [chart_number(bound[0]), chart_number(bound[1])] if bound is not None else [None, None]
                        for bound in collection.bounds_for_series(index)
                    ],
                    "tooltip": {"pointFormat": _errorbar_point_format(member.unit.short_form)},
                }
            )
        return blocks
