"""Exceptions raised by the time-series model."""

from __future__ import annotations


class TimeSeriesError(Exception):
    """Base class for time-series errors."""


class TimeSeriesParseError(TimeSeriesError, ValueError):
    """Raised when a raw API record cannot be turned into a TimeSeries.

    Args:
        message: Human-readable reason.
        series_id: Identifier of the offending record, when known.
    """

    def __init__(self, message: str, *, series_id: str | None = None) -> None:
        """Initialize the error."""

        super().__init__(message)
        self.series_id = series_id
