"""Unit tests for data points, units and invariant number formatting."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from timeseries.points import DataPoint, DataUnit, chart_number, format_number

pytestmark = pytest.mark.unit

WHEN = datetime(2010, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (3.0, "3"),
        (0.5, "0.5"),
        (1e-7, "0.0000001"),
        (1234567.25, "1234567.25"),
        (-2.5, "-2.5"),
        (100, "100"),
        (None, ""),
    ],
)
def test_format_number_is_locale_invariant_without_exponent(value, expected) -> None:
    """Format with a period separator, no grouping and no scientific notation."""

    assert format_number(value) == expected


def test_chart_number_keeps_integral_values_as_ints() -> None:
    """Emit integral floats as ints so JSON reads `3` rather than `3.0`."""

    assert chart_number(3.0) == 3
    assert isinstance(chart_number(3.0), int)
    assert chart_number(0.25) == 0.25
    assert chart_number(None) is None


def test_data_point_requires_high_and_low_together() -> None:
    """Reject a point carrying only one side of its interval."""

    with pytest.raises(ValueError):
        DataPoint(timestamp=WHEN, value=1.0, high=2.0)
    with pytest.raises(ValueError):
        DataPoint(timestamp=WHEN, value=1.0, low=0.5)


def test_with_bounds_returns_new_point_with_both_bounds() -> None:
    """Set both bounds in one step and leave the original untouched."""

    point = DataPoint(timestamp=WHEN, value=1.0, raw_timestamp="2010")
    bounded = point.with_bounds(high=1.5, low=0.5)

    assert not point.has_bounds
    assert bounded.has_bounds
    assert (bounded.low, bounded.high) == (0.5, 1.5)
    assert bounded.formatted_bounds() == "0.5,1.5"
    assert point.formatted_bounds() == ""


def test_data_units_compare_by_short_form_only() -> None:
    """Treat units with the same symbol as one unit regardless of long form."""

    assert DataUnit("kg", "Kilograms") == DataUnit("kg", "Kilogram")
    assert len({DataUnit("kg", "Kilograms"), DataUnit("kg", "")}) == 1
    assert DataUnit("kg") != DataUnit("t")
    assert str(DataUnit("km2", "Square kilometres")) == "km2"
    assert not DataUnit("").has_short_form
