"""Alignment of several time series onto one shared time axis.

A TimeSeriesCollection renders every point of every series to a time marker
(a display string whose granularity follows the series accuracy), merges the
markers into one ordered axis and answers "which point does series i have at
marker m?" in constant time per series.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterable, Sequence
from typing import Final

from .accuracy import MarkerFormatter, default_marker_label
from .localized import DEFAULT_LANGUAGE
from .points import DataPoint, DataUnit
from .series import TimeSeries

logger = logging.getLogger(__name__)

MAX_AXIS_UNITS: Final[int] = 2

_YEAR_MARKER: Final[re.Pattern[str]] = re.compile(r"^-?\d+$")


class TimeSeriesCollection:
    """An immutable, aligned group of time series rendered as one chart.

    Args:
        series: Member series, in display order.
        language: Display language of the collection.
        title: Chart and table caption.
        url: Source URL of the parent parameter, when known.
        formatter: Marker formatter; defaults to the locale-free ISO labels.
    """

    def __init__(
        self,
        series: Iterable[TimeSeries] = (),
        *,
        language: str = DEFAULT_LANGUAGE,
        title: str = "",
        url: str = "",
        formatter: MarkerFormatter | None = None,
    ) -> None:
        """Build the marker axis and per-series lookup tables."""

        self._series: tuple[TimeSeries, ...] = tuple(series)
        self._language = language
        self._title = title
        self._url = url
        self._formatter: MarkerFormatter = formatter or default_marker_label

        markers: dict[str, None] = {}
        lookups: list[dict[str, DataPoint]] = []
        units: list[DataUnit] = []
        for member in self._series:
            lookup: dict[str, DataPoint] = {}
            for point in member.points:
                try:
                    marker = self._formatter(point, member.accuracy)
                except Exception:
                    logger.exception("Skipping point %r of time series %s: marker rendering failed.", point, member.id)
                    continue
                if marker in lookup:
                    logger.debug("Duplicate marker %r in time series %s; keeping the first point.", marker, member.id)
                    continue
                lookup[marker] = point
                markers.setdefault(marker, None)
            lookups.append(lookup)
            if member.unit not in units:
                units.append(member.unit)

        self._markers: tuple[str, ...] = tuple(markers)
        self._lookups: tuple[dict[str, DataPoint], ...] = tuple(lookups)
        self._units: tuple[DataUnit, ...] = tuple(units)
        if len(units) > MAX_AXIS_UNITS:
            logger.warning(
                "Collection %r has %d units; only %s get their own y-axis.",
                title,
                len(units),
                ", ".join(repr(unit.short_form) for unit in units[:MAX_AXIS_UNITS]),
            )

    def __len__(self) -> int:
        return len(self._series)

    def __repr__(self) -> str:
        return f"TimeSeriesCollection(title={self._title!r}, series={[s.id for s in self._series]!r})"

    @property
    def series(self) -> tuple[TimeSeries, ...]:
        return self._series

    @property
    def language(self) -> str:
        return self._language

    @property
    def title(self) -> str:
        return self._title

    @property
    def url(self) -> str:
        return self._url

    @property
    def formatter(self) -> MarkerFormatter:
        return self._formatter

    @property
    def time_markers(self) -> tuple[str, ...]:
        """Return every marker, ordered by first occurrence across the series."""

        return self._markers

    @property
    def units(self) -> tuple[DataUnit, ...]:
        """Return the distinct units (by short form), first-seen order."""

        return self._units

    @property
    def axis_units(self) -> tuple[DataUnit, ...]:
        """Return the units that get a y-axis of their own (at most two)."""

        return self._units[:MAX_AXIS_UNITS]

    @property
    def has_error_band_series(self) -> bool:
        return any(member.is_error_band for member in self._series)

    def all_accuracy_compatible(self) -> bool:
        """Return True when every series shares one accuracy.

        Mixed accuracies still render, but their markers may not line up in a
        meaningful way (e.g. `2010` next to `2010-03`).
        """

        labels = {member.accuracy.label for member in self._series}
        return len(labels) <= 1

    def data_points_for_marker(self, marker: str) -> tuple[DataPoint | None, ...]:
        """Return each series' point at `marker`.

        Args:
            marker: A time marker label.

        Returns:
            A tuple with one slot per series, in series order; a slot is None
            when that series has no point at the marker.
        """

        return tuple(lookup.get(marker) for lookup in self._lookups)

    def point_for(self, series_index: int, marker: str) -> DataPoint | None:
        return self._lookups[series_index].get(marker)

    def values_for_series(self, series_index: int) -> list[float | None]:
        """Return the series' values aligned to `time_markers`, None where absent."""

        lookup = self._lookups[series_index]
        values: list[float | None] = []
        for marker in self._markers:
            point = lookup.get(marker)
            values.append(point.value if point is not None else None)
        return values

    def bounds_for_series(self, series_index: int) -> list[tuple[float, float] | None]:
        """Return `(low, high)` per marker, None where the point or its bounds are absent."""

        lookup = self._lookups[series_index]
        bounds: list[tuple[float, float] | None] = []
        for marker in self._markers:
            point = lookup.get(marker)
            if point is None or point.low is None or point.high is None:
                bounds.append(None)
            else:
                bounds.append((point.low, point.high))
        return bounds

    def series_with_unit(self, unit: DataUnit) -> tuple[TimeSeries, ...]:
        return tuple(member for member in self._series if member.unit == unit)

    def axis_index_for(self, series: TimeSeries) -> int | None:
        """Return the y-axis index for the series' unit, or None past the retained units."""

        try:
            return self.axis_units.index(series.unit)
        except ValueError:
            return None

    @property
    def authors(self) -> tuple[str, ...]:
        """Return the distinct authors of all member series."""

        authors: dict[str, None] = {}
        for member in self._series:
            for author in member.authors:
                authors.setdefault(author, None)
        return tuple(authors)

    def authors_string(self) -> str:
        """Return the authors as `A`, `A & B` or `A, B & C`."""

        authors = self.authors
        if len(authors) <= 1:
            return "".join(authors)
        return f"{', '.join(authors[:-1])} & {authors[-1]}"

    def with_order(self, series_ids: Sequence[str]) -> TimeSeriesCollection:
        """Return a new collection with members re-ordered by id.

        Args:
            series_ids: Member ids in the desired order. Ids not listed keep
                their relative order after the listed ones.

        Returns:
            A new collection; this one is left untouched.
        """

        position = {series_id: index for index, series_id in enumerate(series_ids)}
        ordered = sorted(self._series, key=lambda member: position.get(member.id, len(position)))
        return TimeSeriesCollection(
            ordered,
            language=self._language,
            title=self._title,
            url=self._url,
            formatter=self._formatter,
        )

    def with_filled_years(self) -> TimeSeriesCollection:
        """Return a copy whose yearly markers are evenly spaced.

        The smallest gap between consecutive markers is taken as the step and
        every skipped year is inserted as a marker where no series has a point
        (`2010, 2012, 2013, 2015` becomes `2010` through `2015`).

        Returns:
            A new collection, or this one unchanged when the markers are not
            plain years in increasing order.
        """

        if len(self._markers) < 2 or not all(_YEAR_MARKER.match(marker) for marker in self._markers):
            return self
        years = [int(marker) for marker in self._markers]
        step = min(later - earlier for earlier, later in zip(years, years[1:]))
        if step <= 0:
            logger.debug("Not filling year gaps in %r: markers are not in increasing order.", self._title)
            return self

        markers: list[str] = [self._markers[0]]
        previous = years[0]
        for marker, year in zip(self._markers[1:], years[1:]):
            while year - previous > step:
                previous += step
                markers.append(str(previous))
            markers.append(marker)
            previous = year

        filled = copy.copy(self)
        filled._markers = tuple(markers)
        return filled
