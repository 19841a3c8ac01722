"""TimeSeries model and parsing of raw MOSJ API records.

Parsing is tolerant: anything optional that is missing degrades to an empty
value with a log message, and only a record without an identifier is rejected.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from .accuracy import Accuracy, MarkerFormatter, default_marker_label, parse_accuracy, parse_api_datetime
from .exceptions import TimeSeriesParseError
from .localized import DEFAULT_LANGUAGE, localized_string
from .points import DataPoint, DataUnit

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR: Final[str] = "[UNKNOWN AUTHOR]"


@dataclass(frozen=True, slots=True)
class TimeSeries:
    """A single named, unit-bearing sequence of data points.

    Args:
        id: Stable identifier of the series (from the API).
        label: Display name used for legends and table headers.
        unit: Measurement unit.
        accuracy: Timestamp precision, which drives marker rendering.
        points: Data points in source order.
        title: Full localized title, when the source has one.
        authors: Distinct author names, in source order.
    """

    id: str
    label: str
    unit: DataUnit
    accuracy: Accuracy
    points: tuple[DataPoint, ...] = ()
    title: str | None = None
    authors: tuple[str, ...] = ()

    @property
    def is_error_band(self) -> bool:
        """Return True when the series has points and every point has bounds."""

        return bool(self.points) and all(point.has_bounds for point in self.points)

    def markers(self, formatter: MarkerFormatter = default_marker_label) -> tuple[str, ...]:
        """Return the time marker of each point, in source order."""

        return tuple(formatter(point, self.accuracy) for point in self.points)

    def _numbers(self) -> list[float]:
        numbers: list[float] = []
        for point in self.points:
            numbers.extend(v for v in (point.value, point.low, point.high) if v is not None)
        return numbers

    @property
    def min_value(self) -> float | None:
        """Return the lowest value or lower bound, or None for an empty series."""

        numbers = self._numbers()
        return min(numbers) if numbers else None

    @property
    def max_value(self) -> float | None:
        numbers = self._numbers()
        return max(numbers) if numbers else None

    @property
    def integer_values_only(self) -> bool:
        """Return True when every value and bound is a whole number."""

        return all(float(number).is_integer() for number in self._numbers())

    @property
    def positive_values_only(self) -> bool:
        return all(number >= 0 for number in self._numbers())


def _as_list(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    return []


def _as_number(raw: Any) -> float | None:
    """Coerce an API number (or numeric string) to a finite float."""

    if isinstance(raw, bool) or raw is None:
        return None
    if not isinstance(raw, (int, float, str)):
        return None
    try:
        number = float(raw.strip() if isinstance(raw, str) else raw)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _parse_unit(record: Mapping[str, Any], *, series_id: str, language: str) -> DataUnit:
    raw_unit = record.get("unit")
    short_form = ""
    if isinstance(raw_unit, Mapping):
        symbol = raw_unit.get("symbol")
        short_form = symbol.strip() if isinstance(symbol, str) else ""
    elif isinstance(raw_unit, str):
        short_form = raw_unit.strip()

    long_form = localized_string(_as_list(record.get("units")), "unit", language)
    if long_form is None:
        value_labels = [
            entry
            for entry in _as_list(record.get("labels"))
            if isinstance(entry, Mapping) and entry.get("variable") == "value"
        ]
        long_form = localized_string(value_labels, "label", language)
    if long_form is None:
        logger.warning("Value label missing on time series %s.", series_id)
        long_form = ""
    return DataUnit(short_form=short_form, long_form=long_form)


def _parse_points(record: Mapping[str, Any], *, series_id: str, accuracy: Accuracy) -> tuple[DataPoint, ...]:
    raw_points = record.get("data")
    if raw_points is None:
        raw_points = record.get("points")

    points: list[DataPoint] = []
    for index, raw in enumerate(_as_list(raw_points)):
        if not isinstance(raw, Mapping):
            logger.error("Skipping malformed data point #%d in time series %s.", index, series_id)
            continue
        value = _as_number(raw.get("value"))
        if value is None:
            logger.error("Skipping data point #%d in time series %s: no numeric value.", index, series_id)
            continue

        raw_timestamp = raw.get("datetime", raw.get("when"))
        if not isinstance(raw_timestamp, str) or not raw_timestamp.strip():
            logger.error("Skipping data point #%d in time series %s: no timestamp.", index, series_id)
            continue
        try:
            timestamp = parse_api_datetime(raw_timestamp)
        except ValueError:
            if not accuracy.is_literal:
                logger.error(
                    "Skipping data point #%d in time series %s: unparseable timestamp %r.",
                    index,
                    series_id,
                    raw_timestamp,
                )
                continue
            timestamp = None

        point = DataPoint(timestamp=timestamp, value=value, raw_timestamp=raw_timestamp.strip())
        high = _as_number(raw.get("high"))
        low = _as_number(raw.get("low"))
        if high is not None and low is not None:
            point = point.with_bounds(high=high, low=low)
        elif high is not None or low is not None:
            logger.warning(
                "Ignoring one-sided error bound on data point #%d in time series %s.",
                index,
                series_id,
            )
        points.append(point)
    return tuple(points)


def _parse_authors(record: Mapping[str, Any], *, language: str) -> tuple[str, ...]:
    authors: list[str] = []
    for entry in _as_list(record.get("authors")):
        name = None
        if isinstance(entry, Mapping):
            name = localized_string(
                _as_list(entry.get("names")),
                "@value",
                language,
                lang_key="@language",
            )
        name = name or UNKNOWN_AUTHOR
        if name not in authors:
            authors.append(name)
    return tuple(authors)


def parse_time_series(record: Mapping[str, Any], *, language: str = DEFAULT_LANGUAGE) -> TimeSeries:
    """Build a TimeSeries from a raw API record.

    Args:
        record: Decoded JSON object describing one time series.
        language: Preferred language for titles, labels and units.

    Returns:
        The parsed TimeSeries. Malformed points are skipped and logged.

    Raises:
        TimeSeriesParseError: When the record is not an object or has no `id`.
    """

    if not isinstance(record, Mapping):
        raise TimeSeriesParseError("Time series record must be a JSON object.")
    series_id = record.get("id")
    if not isinstance(series_id, str) or not series_id.strip():
        raise TimeSeriesParseError("Time series record has no 'id'.")
    series_id = series_id.strip()

    titles = _as_list(record.get("titles"))
    title = localized_string(titles, "title", language)
    label = localized_string(titles, "label", language) or title or series_id

    raw_format = record.get("datetime_format")
    accuracy = parse_accuracy(raw_format if isinstance(raw_format, str) else None)

    return TimeSeries(
        id=series_id,
        label=label,
        unit=_parse_unit(record, series_id=series_id, language=language),
        accuracy=accuracy,
        points=_parse_points(record, series_id=series_id, accuracy=accuracy),
        title=title,
        authors=_parse_authors(record, language=language),
    )


def parse_time_series_list(
    records: Iterable[Mapping[str, Any]],
    *,
    language: str = DEFAULT_LANGUAGE,
) -> list[TimeSeries]:
    """Parse many records, skipping (and logging) the ones that fail."""

    parsed: list[TimeSeries] = []
    for index, record in enumerate(records):
        try:
            parsed.append(parse_time_series(record, language=language))
        except TimeSeriesParseError:
            logger.exception("Skipping time series record #%d.", index)
    return parsed
