"""Render a chart, table or CSV export from a local file of time-series records."""

from __future__ import annotations

import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from core.charting.csv_export import collection_to_csv
from core.charting.highcharts import ChartSerializer
from core.charting.overrides import parse_overrides
from core.charting.tables import render_data_table, render_parameter_table
from core.services import build_collection
from timeseries.series import parse_time_series_list


class Command(BaseCommand):
    """Render Highcharts options, an HTML table or CSV from raw API records."""

    help = "Render a MOSJ chart from a JSON file holding a list of time-series records."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("records", help="Path to a JSON file: a list of time-series records.")
        parser.add_argument("--title", default="", help="Chart and table caption.")
        parser.add_argument("--lang", default="en", help="Display language (en, no, nb).")
        parser.add_argument(
            "--overrides",
            default=None,
            help="JSON object with chart overrides (e.g. '{\"hideMarkers\": true}').",
        )
        parser.add_argument(
            "--format",
            choices=["config", "table", "parameter-table", "csv"],
            default="config",
            help="Output format.",
        )

    def handle(self, *args, **options) -> None:
        """Run the command."""

        path = Path(options["records"])
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CommandError(f"Cannot read {path}: {exc}") from exc
        except ValueError as exc:
            raise CommandError(f"{path} is not valid JSON: {exc}") from exc
        if isinstance(records, dict):
            records = [records]
        if not isinstance(records, list):
            raise CommandError(f"{path} must contain a JSON list of time-series records.")

        language: str = options["lang"]
        series = parse_time_series_list(records, language=language)
        collection = build_collection(series, language=language, title=options["title"])

        output_format: str = options["format"]
        if output_format == "config":
            config = ChartSerializer(collection, parse_overrides(options["overrides"])).chart_config_string()
            if config is None:
                raise CommandError("The chart configuration could not be generated; see the log for details.")
            self.stdout.write(config)
        elif output_format == "table":
            self.stdout.write(render_data_table(collection, language=language), ending="")
        elif output_format == "parameter-table":
            self.stdout.write(render_parameter_table(collection, language=language), ending="")
        else:
            self.stdout.write(collection_to_csv(collection), ending="")
