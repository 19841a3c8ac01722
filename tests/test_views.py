"""Integration tests for the parameter chart views."""

from __future__ import annotations

import json

import pytest
from django.urls import reverse

from core import views

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def fake_source(monkeypatch, parameter_source):
    """Serve canned records instead of calling the MOSJ API."""

    monkeypatch.setattr(views, "get_parameter_source", lambda: parameter_source)
    return parameter_source


def test_parameter_detail_embeds_config_and_table(client) -> None:
    """Render the page with a json_script payload and the data table."""

    response = client.get(reverse("core:parameter_detail", args=["walrus"]))

    assert response.status_code == 200
    content = response.content.decode()
    assert '<script id="chart-config" type="application/json">' in content
    assert 'class="hs-time-marker"' in content
    assert "Walrus population" in content
    assert "core/charts.js" in content
    assert response.context["chart_config"]["title"]["text"] == "Walrus population"


def test_parameter_chart_config_returns_json(client) -> None:
    """Return the Highcharts options as JSON."""

    response = client.get(reverse("core:parameter_chart_config", args=["walrus"]))

    assert response.status_code == 200
    assert response["Content-Type"] == "application/json"
    config = json.loads(response.content)
    assert [block["id"] for block in config["series"]] == ["adults", "calves"]


def test_parameter_chart_config_honors_overrides_and_language(client) -> None:
    """Apply `?overrides=` and `?lang=` query parameters."""

    response = client.get(
        reverse("core:parameter_chart_config", args=["walrus"]),
        {"lang": "no", "overrides": json.dumps({"hideMarkers": True})},
    )
    config = json.loads(response.content)

    assert config["title"]["text"] == "Hvalrossbestand"
    assert config["plotOptions"]["series"]["marker"] == {"enabled": False}


def test_parameter_chart_config_reports_unavailable_chart(client, monkeypatch) -> None:
    """Return `{}` with status 502 when the chart cannot be generated."""

    monkeypatch.setattr("core.charting.highcharts.ChartSerializer.chart_config_string", lambda self: None)

    response = client.get(reverse("core:parameter_chart_config", args=["walrus"]))

    assert response.status_code == 502
    assert json.loads(response.content) == {}


def test_parameter_csv_is_an_attachment(client) -> None:
    """Serve the CSV export as a download."""

    response = client.get(reverse("core:parameter_csv", args=["walrus"]))

    assert response.status_code == 200
    assert response["Content-Disposition"] == 'attachment; filename="walrus.csv"'
    assert response.content.decode().startswith("Title;Unit;2010;2011;2012")


def test_unknown_parameter_still_renders(client) -> None:
    """Render the page with a warning when the parameter cannot be loaded."""

    response = client.get(reverse("core:parameter_detail", args=["unknown"]))

    assert response.status_code == 200
    assert "could not be loaded" in response.content.decode()
