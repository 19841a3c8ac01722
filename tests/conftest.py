"""Pytest fixtures shared across the suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from core.datasource import DataSourceError

RecordFactory = Callable[..., dict[str, Any]]


def build_record(
    series_id: str,
    points: Sequence[tuple[str, float | None] | tuple[str, float, float, float]],
    *,
    unit: str | dict[str, str] | None = "kg",
    unit_long: str | None = "Kilograms",
    label: str | None = None,
    title: str | None = None,
    datetime_format: str | None = "%Y",
    authors: Sequence[str] = (),
) -> dict[str, Any]:
    """Build a raw MOSJ API time-series record.

    Args:
        series_id: Record id.
        points: `(datetime, value)` or `(datetime, value, low, high)` tuples.
        unit: Unit symbol, `{"symbol": ...}` object, or None to omit.
        unit_long: English long unit name, or None to omit.
        label: English series label.
        title: English series title.
        datetime_format: API datetime format token, or None to omit.
        authors: English author names.

    Returns:
        A dict shaped like the decoded API response.
    """

    data: list[dict[str, Any]] = []
    for point in points:
        entry: dict[str, Any] = {"datetime": point[0], "value": point[1]}
        if len(point) == 4:
            entry["low"] = point[2]
            entry["high"] = point[3]
        data.append(entry)

    record: dict[str, Any] = {"id": series_id, "data": data}
    titles: list[dict[str, str]] = []
    if title is not None or label is not None:
        entry = {"lang": "en"}
        if title is not None:
            entry["title"] = title
        if label is not None:
            entry["label"] = label
        titles.append(entry)
    record["titles"] = titles
    if unit is not None:
        record["unit"] = unit
    if unit_long is not None:
        record["units"] = [{"unit": unit_long, "lang": "en"}]
    if datetime_format is not None:
        record["datetime_format"] = datetime_format
    if authors:
        record["authors"] = [{"names": [{"@value": name, "@language": "en"}]} for name in authors]
    return record


@pytest.fixture
def make_record() -> RecordFactory:
    """Return the raw API record builder."""

    return build_record


class FakeParameterSource:
    """In-memory ParameterSource serving canned records."""

    def __init__(
        self,
        parameters: dict[str, dict[str, Any]] | None = None,
        series: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self.parameters = parameters or {}
        self.series = series or {}
        self.requested: list[str] = []

    def fetch_parameter(self, parameter_id: str) -> dict[str, Any]:
        self.requested.append(parameter_id)
        if parameter_id not in self.parameters:
            raise DataSourceError(f"Unknown parameter {parameter_id}.")
        return self.parameters[parameter_id]

    def fetch_time_series(self, url: str) -> dict[str, Any]:
        self.requested.append(url)
        if url not in self.series:
            raise DataSourceError(f"Unknown time series {url}.")
        return self.series[url]


@pytest.fixture
def parameter_source() -> FakeParameterSource:
    """Return a source with one parameter referencing two series and one broken URL."""

    return FakeParameterSource(
        parameters={
            "walrus": {
                "id": "walrus",
                "titles": [
                    {"title": "Walrus population", "lang": "en"},
                    {"title": "Hvalrossbestand", "lang": "nb"},
                ],
                "timeseries": [
                    "https://api.example/timeseries/adults",
                    "https://api.example/timeseries/calves",
                    "https://api.example/timeseries/missing",
                ],
            }
        },
        series={
            "https://api.example/timeseries/adults": build_record(
                "adults",
                [("2010", 120), ("2011", 130.5)],
                unit="count",
                unit_long="Individuals",
                label="Adults",
                authors=("Kit Jensen", "Ola Nordmann"),
            ),
            "https://api.example/timeseries/calves": build_record(
                "calves",
                [("2011", 12), ("2012", 15)],
                unit="count",
                unit_long="Individuals",
                label="Calves",
                authors=("Kit Jensen",),
            ),
        },
    )


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no Django request cycle or IO.
    - `integration`: tests touching Django views, commands, l10n or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
