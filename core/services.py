"""Build chart artifacts for a MOSJ parameter.

A MOSJ parameter (e.g. "Sea ice extent in the Barents Sea") references one or
more time series by URL. `build_parameter_charts` resolves them through a
ParameterSource and renders every artifact the pages need.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from core.charting.csv_export import collection_to_csv
from core.charting.highcharts import ChartSerializer
from core.charting.overrides import ChartOverrides
from core.charting.tables import render_data_table
from core.datasource import DataSourceError, ParameterSource
from core.markers import LocalizedMarkerFormatter
from timeseries.collection import TimeSeriesCollection
from timeseries.exceptions import TimeSeriesParseError
from timeseries.localized import localized_string
from timeseries.series import TimeSeries, parse_time_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParameterCharts:
    """Rendered artifacts for one parameter.

    Args:
        parameter_id: Requested parameter id.
        collection: Aligned time series (possibly empty).
        config_json: Highcharts options as JSON, or None when unavailable.
        table_html: HTML data table.
        csv_text: CSV export.
        warnings: Human-readable problems encountered while building.
    """

    parameter_id: str
    collection: TimeSeriesCollection
    config_json: str | None
    table_html: str
    csv_text: str
    warnings: tuple[str, ...] = ()


def parameter_title(record: Mapping[str, Any], *, language: str) -> str:
    """Return the localized parameter title, falling back to its id."""

    titles = record.get("titles")
    title = localized_string(titles if isinstance(titles, list) else [], "title", language)
    return title or str(record.get("id") or "")


def _resolve_series(
    record: Mapping[str, Any],
    *,
    parameter_id: str,
    source: ParameterSource,
    language: str,
    warnings: list[str],
) -> list[TimeSeries]:
    urls = record.get("timeseries")
    if not isinstance(urls, list):
        return []

    resolved: list[TimeSeries] = []
    for url in urls:
        if not isinstance(url, str) or not url.strip():
            logger.warning("Parameter %s references an invalid time series entry %r.", parameter_id, url)
            continue
        try:
            series_record = source.fetch_time_series(url)
            resolved.append(parse_time_series(series_record, language=language))
        except (DataSourceError, TimeSeriesParseError) as exc:
            logger.warning("Parameter %s includes a problem time series at %s: %s", parameter_id, url, exc)
            warnings.append(f"Time series {url} could not be loaded.")
    return resolved


def build_collection(
    series: list[TimeSeries],
    *,
    language: str,
    title: str,
    url: str = "",
) -> TimeSeriesCollection:
    """Return a collection whose markers use localized month names."""

    return TimeSeriesCollection(
        series,
        language=language,
        title=title,
        url=url,
        formatter=LocalizedMarkerFormatter(language),
    )


def render_parameter_charts(
    collection: TimeSeriesCollection,
    *,
    parameter_id: str,
    overrides: ChartOverrides | None = None,
    warnings: tuple[str, ...] = (),
) -> ParameterCharts:
    """Render config, table and CSV for an already-built collection."""

    config_json = ChartSerializer(collection, overrides).chart_config_string()
    all_warnings = list(warnings)
    if config_json is None:
        all_warnings.append("The chart could not be generated.")
    if not collection.all_accuracy_compatible():
        all_warnings.append("The time series use different timestamp accuracies.")
    return ParameterCharts(
        parameter_id=parameter_id,
        collection=collection,
        config_json=config_json,
        table_html=render_data_table(collection, css_class="mosj-data-table"),
        csv_text=collection_to_csv(collection),
        warnings=tuple(all_warnings),
    )


def build_parameter_charts(
    parameter_id: str,
    *,
    source: ParameterSource,
    language: str,
    overrides: ChartOverrides | None = None,
) -> ParameterCharts:
    """Fetch a parameter and its time series, then render every artifact.

    Args:
        parameter_id: MOSJ parameter id.
        source: Where to fetch records from.
        language: Display language.
        overrides: Optional chart overrides.

    Returns:
        ParameterCharts. Fetch failures are reported in `warnings` and
        produce an empty collection; this function does not raise them.
    """

    warnings: list[str] = []
    try:
        record = source.fetch_parameter(parameter_id)
    except DataSourceError as exc:
        logger.error("Failed to fetch MOSJ parameter %s: %s", parameter_id, exc)
        warnings.append(f"Parameter {parameter_id} could not be loaded.")
        empty = build_collection([], language=language, title=parameter_id)
        return render_parameter_charts(empty, parameter_id=parameter_id, overrides=overrides, warnings=tuple(warnings))

    series = _resolve_series(
        record,
        parameter_id=parameter_id,
        source=source,
        language=language,
        warnings=warnings,
    )
    collection = build_collection(
        series,
        language=language,
        title=parameter_title(record, language=language),
    )
    return render_parameter_charts(
        collection,
        parameter_id=parameter_id,
        overrides=overrides,
        warnings=tuple(warnings),
    )
