"""Views rendering MOSJ parameter charts, tables and CSV exports."""

from __future__ import annotations

import json
import re

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.utils import translation
from django.views.decorators.http import require_GET

from core.charting.overrides import parse_overrides
from core.datasource import ApiDataSource, ParameterSource
from core.markers import django_language
from core.services import ParameterCharts, build_parameter_charts


def get_parameter_source() -> ParameterSource:
    """Return the data source used by views (patched in tests)."""

    return ApiDataSource.from_settings()


def _request_language(request: HttpRequest) -> str:
    """Return the display language from `?lang=`, else the active language."""

    requested = (request.GET.get("lang") or "").strip().lower()
    supported = {code for code, _ in settings.LANGUAGES}
    if requested and django_language(requested) in supported:
        return requested
    return (translation.get_language() or settings.LANGUAGE_CODE).split("-")[0]


def _charts_for_request(request: HttpRequest, parameter_id: str) -> ParameterCharts:
    return build_parameter_charts(
        parameter_id,
        source=get_parameter_source(),
        language=_request_language(request),
        overrides=parse_overrides(request.GET.get("overrides")),
    )


@require_GET
def parameter_detail(request: HttpRequest, parameter_id: str) -> HttpResponse:
    """Render the chart page for a parameter."""

    charts = _charts_for_request(request, parameter_id)
    config = json.loads(charts.config_json) if charts.config_json else None
    context = {
        "parameter_id": parameter_id,
        "title": charts.collection.title,
        "chart_config": config,
        "table_html": charts.table_html,
        "authors": charts.collection.authors_string(),
        "warnings": charts.warnings,
        "language": charts.collection.language,
        "highcharts_url": settings.MOSJ_HIGHCHARTS_URL,
        "highcharts_more_url": settings.MOSJ_HIGHCHARTS_MORE_URL,
    }
    return render(request, "core/parameter.html", context)


@require_GET
def parameter_chart_config(request: HttpRequest, parameter_id: str) -> HttpResponse:
    """Return the Highcharts options as JSON (502 with `{}` when unavailable)."""

    charts = _charts_for_request(request, parameter_id)
    if charts.config_json is None:
        return JsonResponse({}, status=502)
    return HttpResponse(charts.config_json, content_type="application/json")


@require_GET
def parameter_csv(request: HttpRequest, parameter_id: str) -> HttpResponse:
    """Download the parameter's series as CSV."""

    charts = _charts_for_request(request, parameter_id)
    response = HttpResponse(charts.csv_text, content_type="text/csv; charset=utf-8")
    filename = re.sub(r"[^A-Za-z0-9_.-]", "_", parameter_id)
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    return response
