"""Unit tests for building TimeSeries from raw API records."""

from __future__ import annotations

import json
import logging

import pytest

from timeseries.accuracy import AccuracyLevel
from timeseries.exceptions import TimeSeriesParseError
from timeseries.series import UNKNOWN_AUTHOR, parse_time_series, parse_time_series_list

pytestmark = pytest.mark.unit


def test_parse_time_series_reads_core_fields(make_record) -> None:
    """Read id, label, unit, accuracy, points and authors from a record."""

    record = make_record(
        "ice",
        [("2010-03", 1.5, 1.0, 2.0), ("2010-04", 2.5, 2.0, 3.0)],
        unit={"symbol": "km2"},
        unit_long="Sea ice extent",
        label="Ice",
        title="Sea ice extent in March",
        datetime_format="%Y-%m",
        authors=("Kit Jensen", "Kit Jensen", "Ola Nordmann"),
    )
    series = parse_time_series(record)

    assert series.id == "ice"
    assert series.label == "Ice"
    assert series.title == "Sea ice extent in March"
    assert series.unit.short_form == "km2"
    assert series.unit.long_form == "Sea ice extent"
    assert series.accuracy.level is AccuracyLevel.month
    assert [point.value for point in series.points] == [1.5, 2.5]
    assert series.is_error_band
    assert series.authors == ("Kit Jensen", "Ola Nordmann")


def test_parse_time_series_prefers_requested_language() -> None:
    """Pick Norwegian strings for `no`, matching both `no` and `nb` entries."""

    record = {
        "id": "walrus",
        "titles": [
            {"title": "Walrus", "label": "Walrus", "lang": "en"},
            {"title": "Hvalross", "label": "Hvalross", "lang": "nb"},
        ],
        "unit": "stk",
        "units": [{"unit": "Individuals", "lang": "en"}, {"unit": "Individer", "lang": "no"}],
        "data": [],
    }

    series = parse_time_series(record, language="no")
    assert series.label == "Hvalross"
    assert series.unit.long_form == "Individer"

    fallback = parse_time_series(record, language="de")
    assert fallback.label == "Walrus"


def test_parse_time_series_falls_back_to_title_then_id(make_record) -> None:
    """Use the title as label when no label exists, then the id."""

    assert parse_time_series(make_record("a", [], title="Only title")).label == "Only title"
    assert parse_time_series(make_record("b", [])).label == "b"


def test_parse_time_series_requires_id() -> None:
    """Reject a record without an identifier."""

    with pytest.raises(TimeSeriesParseError):
        parse_time_series({"titles": [], "data": []})


def test_parse_time_series_skips_malformed_points(make_record, caplog) -> None:
    """Skip points without a value or with an unparseable timestamp and log them."""

    record = make_record("a", [("2010", 1), ("2011", None), ("sometime", 3), ("2012", "4.5")])

    with caplog.at_level(logging.ERROR, logger="timeseries.series"):
        series = parse_time_series(record)

    assert [point.raw_timestamp for point in series.points] == ["2010", "2012"]
    assert series.points[1].value == 4.5
    assert len(caplog.records) == 2


def test_parse_time_series_drops_one_sided_bounds(make_record, caplog) -> None:
    """Keep the value but drop a lone `high` with a warning."""

    record = make_record("a", [("2010", 1)])
    record["data"][0]["high"] = 2

    with caplog.at_level(logging.WARNING, logger="timeseries.series"):
        series = parse_time_series(record)

    assert series.points[0].value == 1
    assert not series.points[0].has_bounds
    assert not series.is_error_band
    assert "one-sided" in caplog.text


def test_parse_time_series_degrades_missing_unit(make_record, caplog) -> None:
    """Use empty unit forms and warn when the value label is missing."""

    record = make_record("a", [("2010", 1)], unit=None, unit_long=None)

    with caplog.at_level(logging.WARNING, logger="timeseries.series"):
        series = parse_time_series(record)

    assert series.unit.short_form == ""
    assert series.unit.long_form == ""
    assert "Value label missing" in caplog.text


def test_parse_time_series_reads_value_label_from_labels(make_record) -> None:
    """Read the unit long form from `labels` entries for the `value` variable."""

    record = make_record("a", [("2010", 1)], unit_long=None)
    record["labels"] = [
        {"variable": "when", "label": "Year", "lang": "en"},
        {"variable": "value", "label": "Population", "lang": "en"},
    ]
    assert parse_time_series(record).unit.long_form == "Population"


def test_parse_time_series_keeps_literal_timestamps(make_record) -> None:
    """Keep unparseable timestamps when the series uses a literal accuracy."""

    series = parse_time_series(make_record("a", [("1990-1999", 1)], datetime_format="decade"))

    assert series.accuracy.is_literal
    assert series.points[0].timestamp is None
    assert series.markers() == ("1990-1999",)


def test_parse_time_series_labels_unnamed_authors() -> None:
    """Use a placeholder name for author entries without names."""

    series = parse_time_series({"id": "a", "data": [], "authors": [{"names": []}]})
    assert series.authors == (UNKNOWN_AUTHOR,)


def test_parse_time_series_list_skips_bad_records(make_record, caplog) -> None:
    """Skip records that fail to parse without aborting the batch."""

    with caplog.at_level(logging.ERROR, logger="timeseries.series"):
        parsed = parse_time_series_list([make_record("a", []), {"data": []}, make_record("b", [])])

    assert [series.id for series in parsed] == ["a", "b"]
    assert "Skipping time series record #1" in caplog.text


def test_series_value_statistics(make_record) -> None:
    """Report min/max over values and bounds plus integer and sign flags."""

    series = parse_time_series(make_record("a", [("2010", 2, 1, 3), ("2011", 5, 4, 6)]))

    assert series.min_value == 1
    assert series.max_value == 6
    assert series.integer_values_only
    assert series.positive_values_only

    fractional = parse_time_series(make_record("b", [("2010", -0.5)]))
    assert not fractional.integer_values_only
    assert not fractional.positive_values_only


def test_parse_time_series_list_skips_values_too_large_for_a_float(caplog) -> None:
    """Skip a point whose integer value overflows a float instead of failing the batch."""

    records = json.loads(
        '[{"id": "big", "datetime_format": "%Y", "data": ['
        '{"datetime": "2010", "value": 1' + "0" * 400 + "}, "
        '{"datetime": "2011", "value": 2}]}]'
    )

    with caplog.at_level(logging.ERROR, logger="timeseries.series"):
        parsed = parse_time_series_list(records)

    assert [series.id for series in parsed] == ["big"]
    assert parsed[0].markers() == ("2011",)
    assert "no numeric value" in caplog.text
