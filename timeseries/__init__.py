"""Pure time-series package for mosjCharts.

This package holds the data model (points, units, accuracies, series) and the
alignment engine that places several series on one shared time axis. It must
not import Django; presentation concerns live in `core.charting`.
"""

from .accuracy import Accuracy, AccuracyLevel, parse_accuracy
from .collection import TimeSeriesCollection
from .exceptions import TimeSeriesError, TimeSeriesParseError
from .points import DataPoint, DataUnit
from .series import TimeSeries, parse_time_series, parse_time_series_list

__all__ = [
    "Accuracy",
    "AccuracyLevel",
    "DataPoint",
    "DataUnit",
    "TimeSeries",
    "TimeSeriesCollection",
    "TimeSeriesError",
    "TimeSeriesParseError",
    "parse_accuracy",
    "parse_time_series",
    "parse_time_series_list",
]
