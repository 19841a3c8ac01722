"""Data points, units and locale-invariant number formatting.

Every numeric value that leaves this package for a chart goes through
`format_number` or `chart_number` so the output never depends on the process
locale or on Python's float repr switching to scientific notation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal


def format_number(value: float | None) -> str:
    """Format a number with a period separator, no grouping and no exponent.

    Args:
        value: Numeric value, or None.

    Returns:
        The formatted number (`3.0` -> `"3"`, `1e-07` -> `"0.0000001"`), or an
        empty string for None.
    """

    if value is None:
        return ""
    number = Decimal(repr(float(value))).normalize()
    text = f"{number:f}"
    if text == "-0":
        return "0"
    return text


def chart_number(value: float | None) -> int | float | None:
    """Return a JSON-ready number: an int when integral, a float otherwise."""

    if value is None:
        return None
    as_float = float(value)
    if as_float.is_integer():
        return int(as_float)
    return as_float


@dataclass(frozen=True, slots=True)
class DataPoint:
    """One observation in a time series.

    Args:
        timestamp: Parsed, timezone-aware instant; None when the series uses a
            literal timestamp format.
        value: Observed value, or None when the source carries no value.
        high: Upper bound of the uncertainty interval.
        low: Lower bound of the uncertainty interval.
        raw_timestamp: Timestamp string exactly as received from the source.

    Raises:
        ValueError: When only one of `high` / `low` is given.
    """

    timestamp: datetime | None
    value: float | None
    high: float | None = None
    low: float | None = None
    raw_timestamp: str = ""

    def __post_init__(self) -> None:
        """Enforce that high and low are set together."""

        if (self.high is None) != (self.low is None):
            raise ValueError("DataPoint high and low must both be set or both be absent.")

    @property
    def has_bounds(self) -> bool:
        """Return True when the point carries an uncertainty interval."""

        return self.high is not None

    def with_bounds(self, *, high: float, low: float) -> DataPoint:
        """Return a copy of this point carrying the given interval."""

        return replace(self, high=high, low=low)

    def formatted_value(self) -> str:
        return format_number(self.value)

    def formatted_bounds(self, separator: str = ",") -> str:
        """Return `low<separator>high`, or an empty string when unbounded."""

        if not self.has_bounds:
            return ""
        return f"{format_number(self.low)}{separator}{format_number(self.high)}"


@dataclass(frozen=True, slots=True, eq=False)
class DataUnit:
    """Measurement unit of a series.

    Two units are the same unit when their short forms match; the long form
    is display text only.

    Args:
        short_form: Symbol shown on axis ticks and tooltips (e.g. `kg`).
        long_form: Name shown as the axis title (e.g. `Kilograms`).
    """

    short_form: str
    long_form: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataUnit):
            return NotImplemented
        return self.short_form == other.short_form

    def __hash__(self) -> int:
        return hash(self.short_form)

    def __str__(self) -> str:
        return self.short_form

    @property
    def has_short_form(self) -> bool:
        return bool(self.short_form)
